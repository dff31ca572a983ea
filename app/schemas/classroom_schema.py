from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class ClassroomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Math 101"])
    subject: Optional[str] = Field(None, max_length=50, examples=["Mathematics"])


class Classroom(BaseModel):
    classroom_id: int
    name: str
    subject: Optional[str] = None
    school_id: int
    teacher_user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
