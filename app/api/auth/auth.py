#app/api/auth/auth.py
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Dict

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt # type: ignore
from sqlalchemy.orm import Session
from app.api.deps import get_db
from app.models.user_model import User
from app.models.token_model import RefreshToken
from app.schemas.auth_schema import TokenData, AuthenticatedUser
from app.config import SECRET_KEY

logger = logging.getLogger(__name__)

# Cấu hình JWT
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 15
REFRESH_TOKEN_EXPIRE_DAYS = 7

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

def create_refresh_token(user_id: int, db: Session) -> Optional[str]:
    try:
        token = str(uuid.uuid4())
        expired = datetime.now(timezone.utc) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)

        db_token = RefreshToken(
            token=token,
            user_id=user_id,
            expired_at=expired
        )
        db.add(db_token)
        db.commit()
        db.refresh(db_token)
        return db_token.token
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create refresh token for user {user_id}: {e}", exc_info=True)
        return None

def verify_refresh_token(token: str, db: Session) -> Optional[User]:
    db_token = db.query(RefreshToken).filter(
        RefreshToken.token == token,
        RefreshToken.revoked == False,
        RefreshToken.expired_at > datetime.now(timezone.utc)
    ).first()
    if not db_token:
        return None
    return db_token.user

def revoke_refresh_token(token: str, db: Session):
    db_token = db.query(RefreshToken).filter(RefreshToken.token == token).first()
    if db_token:
        db_token.revoked = True
        db.commit()

def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt

def verify_token(token: str) -> TokenData:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        return TokenData(user_id=int(user_id))
    except (JWTError, ValueError):
        raise credentials_exception

def to_authenticated_user(user: User) -> AuthenticatedUser:
    return AuthenticatedUser(
        user_id=user.user_id,
        email=user.email,
        full_name=user.full_name,
        school_id=user.school_id,
        grade=user.grade,
        roles=[user.role.value],
    )

def get_current_active_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> AuthenticatedUser:
    token_data = verify_token(token)
    user = db.get(User, token_data.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return to_authenticated_user(user)

def has_roles(required_roles: List[str]):
    """
    Dependency factory để kiểm tra quyền truy cập dựa trên vai trò.
    Hàm này trả về một dependency mới dựa trên danh sách vai trò yêu cầu.
    """
    def role_checker(current_user: AuthenticatedUser = Depends(get_current_active_user)):
        if not any(role in required_roles for role in current_user.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user
    return role_checker
