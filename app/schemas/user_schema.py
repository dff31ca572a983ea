import re
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator, model_validator
from typing import Optional
from app.models.user_model import RoleEnum

GRADE_PATTERN = re.compile(r"^(9th|10th|11th|12th)$")


class SignupRequest(BaseModel):
    email: EmailStr = Field(..., examples=["student@example.com"])
    password: str = Field(..., min_length=8, examples=["secure_password"])
    full_name: str = Field(..., min_length=2, max_length=100, examples=["Jane Smith"])
    school_name: str = Field(..., min_length=2, max_length=200, examples=["Springfield High"])
    role: str = Field(..., examples=["student"])
    grade: Optional[str] = Field(None, examples=["10th"])

    @field_validator("grade")
    @classmethod
    def validate_grade(cls, v: Optional[str]) -> Optional[str]:
        if v in (None, ""):
            return None
        if not GRADE_PATTERN.match(v):
            raise ValueError("Grade must be one of 9th, 10th, 11th, 12th")
        return v

    @model_validator(mode="after")
    def grade_only_for_students(self):
        # Chỉ học sinh mới có khối lớp
        if self.role != RoleEnum.student.value:
            self.grade = None
        return self


class UserOut(BaseModel):
    user_id: int
    email: str
    full_name: str
    role: RoleEnum
    school_id: Optional[int] = None
    grade: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SignupResponse(BaseModel):
    message: str
    user_id: int
    email: str
    role: str
    school_id: int
    school_name: str
