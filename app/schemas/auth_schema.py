from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import List, Optional


# Pydantic model cho payload của JWT
class TokenData(BaseModel):
    user_id: Optional[int] = None


# Pydantic model cho người dùng đã xác thực
class AuthenticatedUser(BaseModel):
    user_id: int = Field(..., examples=[1], description="ID của người dùng")
    email: EmailStr = Field(..., examples=["john.doe@example.com"], description="Email đăng nhập")
    roles: List[str] = Field(..., examples=[["teacher"]], description="Danh sách vai trò của người dùng")
    school_id: Optional[int] = Field(None, examples=[1], description="Trường của người dùng")
    grade: Optional[str] = Field(None, examples=["10th"])
    is_active: bool = Field(True, examples=[True])
    full_name: Optional[str] = Field(None, examples=["John Doe"], description="Họ và tên đầy đủ")

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    """
    Schema cho yêu cầu đăng nhập.
    """
    email: EmailStr = Field(..., examples=["john.doe@example.com"])
    password: str = Field(..., examples=["secure_password"])


class LoginResponse(BaseModel):
    access_token: str
    token_type: str
    user_id: int
    email: str
    full_name: Optional[str] = None
    roles: List[str]
    school_id: Optional[int] = None
