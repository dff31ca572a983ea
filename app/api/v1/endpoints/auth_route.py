# app/api/v1/endpoints/auth_route.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.api.auth.auth import (
    create_access_token,
    create_refresh_token,
    get_current_active_user,
    revoke_refresh_token,
    verify_refresh_token,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from app.crud import user_crud
from app.schemas.auth_schema import AuthenticatedUser, LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = user_crud.get_user_by_email(db, data.email)
    logger.info(f"Attempting login for user: {data.email}")

    if not user or not user.verify_password(data.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    access_token = create_access_token({"sub": str(user.user_id)})
    refresh_token_str = create_refresh_token(user.user_id, db)

    login_data = LoginResponse(
        access_token=access_token,
        token_type="bearer",
        user_id=user.user_id,
        email=user.email,
        full_name=user.full_name,
        roles=[user.role.value],
        school_id=user.school_id,
    )

    json_response = JSONResponse(content=login_data.model_dump())
    if refresh_token_str:
        json_response.set_cookie(
            key="refresh_token",
            value=refresh_token_str,
            httponly=True,
            samesite="lax",
            max_age=60 * 60 * 24 * REFRESH_TOKEN_EXPIRE_DAYS,
            path="/",
        )
    return json_response


@router.post("/refresh")
def refresh_token(request: Request, response: Response, db: Session = Depends(get_db)):
    refresh_token = request.cookies.get("refresh_token")
    if not refresh_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing refresh token")

    user = verify_refresh_token(refresh_token, db)
    if not user:
        # Token hết hạn hoặc bị revoke thì xóa cookie luôn
        response.delete_cookie("refresh_token", path="/")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired refresh token")

    access_token = create_access_token({"sub": str(user.user_id)})
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout")
def logout(response: Response, request: Request, db: Session = Depends(get_db)):
    refresh_token = request.cookies.get("refresh_token")
    if refresh_token:
        revoke_refresh_token(refresh_token, db)

    response.delete_cookie("refresh_token", path="/")
    return {"msg": "Logged out"}


@router.get("/me", response_model=AuthenticatedUser)
def read_me(current_user: AuthenticatedUser = Depends(get_current_active_user)):
    return current_user
