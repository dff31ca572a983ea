from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional
from datetime import datetime


class ProgressCreate(BaseModel):
    student_user_id: int = Field(..., examples=[3])
    classroom_id: int = Field(..., examples=[1])
    subject: str = Field(..., min_length=2, max_length=50, examples=["Mathematics"])
    score: float = Field(..., ge=0, examples=[85])
    max_score: float = Field(100, gt=0, examples=[100])

    @model_validator(mode="after")
    def score_within_max(self):
        if self.score > self.max_score:
            raise ValueError("Score must be at most max_score")
        return self


class ProgressUpdate(BaseModel):
    score: Optional[float] = Field(None, ge=0)
    subject: Optional[str] = Field(None, min_length=2, max_length=50)


class Progress(BaseModel):
    progress_id: int
    student_user_id: int
    classroom_id: int
    school_id: int
    subject: str
    score: float
    max_score: float
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
