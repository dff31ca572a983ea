from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.models.base_model import Base


class Classroom(Base):
    __tablename__ = 'classrooms'

    classroom_id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    subject = Column(String(50), nullable=True)

    school_id = Column(Integer, ForeignKey('schools.school_id', ondelete="CASCADE"), nullable=False)
    teacher_user_id = Column(Integer, ForeignKey('users.user_id', ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Quan hệ với School và giáo viên phụ trách
    school = relationship("School", back_populates="classrooms")
    teacher = relationship("User", back_populates="classrooms")

    progress_records = relationship(
        "Progress",
        back_populates="classroom",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Classroom(name='{self.name}')>"
