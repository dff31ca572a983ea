from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.user_schema import SignupRequest, SignupResponse
from app.services import registration_service

router = APIRouter()


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Đăng ký tài khoản học sinh, giáo viên hoặc hiệu trưởng",
)
def signup(signup_in: SignupRequest, db: Session = Depends(get_db)):
    try:
        user, school = registration_service.register_user(db, signup_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return SignupResponse(
        message="User created successfully",
        user_id=user.user_id,
        email=user.email,
        role=user.role.value,
        school_id=school.school_id,
        school_name=school.name,
    )
