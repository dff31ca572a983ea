from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime


class ProgressRow(BaseModel):
    """
    Một bản ghi progress đã join với classroom, school, giáo viên và khối lớp của học sinh.
    Đầu vào của bộ tổng hợp analytics.
    """
    student_id: int
    classroom_id: Optional[int] = None
    classroom_name: Optional[str] = None
    school_id: Optional[int] = None
    school_name: Optional[str] = None
    teacher_id: Optional[int] = None
    teacher_name: Optional[str] = None
    subject: Optional[str] = None
    score: float
    max_score: float = 100
    grade: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ScoresDistribution(BaseModel):
    excellent: int = 0          # >= 90
    good: int = 0               # 80 - 89
    satisfactory: int = 0       # 70 - 79
    needs_improvement: int = 0  # < 70


class ClassAverage(BaseModel):
    classroom_id: int
    classroom_name: str
    school_id: Optional[int] = None
    school_name: str
    teacher_id: Optional[int] = None
    teacher_name: str
    subject: Optional[str] = None
    average_score: float = 0
    total_students: int = 0
    scores_distribution: ScoresDistribution = Field(default_factory=ScoresDistribution)
    last_updated: datetime


class SubjectAverage(BaseModel):
    subject: Optional[str] = None
    average: float
    student_count: int


class GradeAverage(BaseModel):
    grade: str
    average: float
    student_count: int


class SchoolAnalytics(BaseModel):
    school_id: Optional[int] = None
    school_name: str
    total_students: int
    total_teachers: int
    total_classrooms: int
    overall_average: float
    subject_averages: List[SubjectAverage] = []
    grade_averages: List[GradeAverage] = []
    last_updated: datetime


class CalculationSummary(BaseModel):
    classAveragesCalculated: int
    schoolAnalyticsCalculated: int
    totalProgressRecords: int
