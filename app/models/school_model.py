from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.models.base_model import Base


class School(Base):
    """
    Model cho bảng schools.
    """
    __tablename__ = 'schools'

    school_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    users = relationship("User", back_populates="school")
    classrooms = relationship("Classroom", back_populates="school", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<School(name='{self.name}')>"
