from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from enum import Enum as PyEnum
from passlib.context import CryptContext  # type: ignore
from app.models.base_model import Base

# Context cho hashing/verify password
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class RoleEnum(PyEnum):
    student = "student"
    teacher = "teacher"
    head_teacher = "head_teacher"


class User(Base):
    """
    Model for the users table (hồ sơ của học sinh, giáo viên và hiệu trưởng).
    """
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(Enum(RoleEnum, name='role_enum'), nullable=False)
    school_id = Column(Integer, ForeignKey("schools.school_id", ondelete="CASCADE"), nullable=True)
    # Khối lớp của học sinh, ví dụ "10th"
    grade = Column(String(10), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    school = relationship("School", back_populates="users")
    classrooms = relationship("Classroom", back_populates="teacher")
    progress_records = relationship(
        "Progress",
        back_populates="student",
        foreign_keys="Progress.student_user_id",
        cascade="all, delete-orphan",
    )
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan", single_parent=True)

    def __repr__(self):
        return f"<User(user_id={self.user_id}, email='{self.email}', role={self.role})>"

    def verify_password(self, plain_password: str) -> bool:
        return pwd_context.verify(plain_password.encode('utf-8')[:72], self.password)

    def set_password(self, plain_password: str):
        self.password = pwd_context.hash(plain_password.encode('utf-8')[:72])
