from sqlalchemy import Column, Integer, String, ForeignKey, DECIMAL, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.models.base_model import Base


class Progress(Base):
    """
    Model cho bảng progress: mỗi bản ghi là một lần chấm điểm của học sinh trong một lớp.
    """
    __tablename__ = 'progress'

    progress_id = Column(Integer, primary_key=True)

    student_user_id = Column(Integer, ForeignKey('users.user_id', ondelete="CASCADE"), nullable=False)
    classroom_id = Column(Integer, ForeignKey('classrooms.classroom_id', ondelete="CASCADE"), nullable=False)
    # Sao chép từ classroom khi tạo để lọc theo trường
    school_id = Column(Integer, ForeignKey('schools.school_id', ondelete="CASCADE"), nullable=False)

    subject = Column(String(50), nullable=False)
    score = Column(DECIMAL(5, 2), nullable=False)
    max_score = Column(DECIMAL(5, 2), nullable=False, default=100)

    # Giáo viên / hiệu trưởng đã nhập điểm
    created_by = Column(Integer, ForeignKey('users.user_id', ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    student = relationship("User", foreign_keys=[student_user_id], back_populates="progress_records")
    classroom = relationship("Classroom", back_populates="progress_records")

    def __repr__(self):
        return f"<Progress(progress_id={self.progress_id}, subject='{self.subject}', score={self.score})>"
