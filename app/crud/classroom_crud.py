from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.classroom_model import Classroom
from app.schemas.auth_schema import AuthenticatedUser
from app.schemas.classroom_schema import ClassroomCreate


def get_classroom(db: Session, classroom_id: int) -> Optional[Classroom]:
    return db.get(Classroom, classroom_id)


def get_classrooms_for_user(db: Session, current_user: AuthenticatedUser) -> List[Classroom]:
    """
    Giáo viên chỉ thấy lớp mình dạy; hiệu trưởng và học sinh thấy các lớp trong trường.
    """
    stmt = select(Classroom)
    if "teacher" in current_user.roles:
        stmt = stmt.where(Classroom.teacher_user_id == current_user.user_id)
    else:
        stmt = stmt.where(Classroom.school_id == current_user.school_id)
    return db.execute(stmt.order_by(Classroom.classroom_id)).scalars().all()


def create_classroom(db: Session, classroom_in: ClassroomCreate, current_user: AuthenticatedUser) -> Classroom:
    db_classroom = Classroom(
        name=classroom_in.name,
        subject=classroom_in.subject,
        school_id=current_user.school_id,
        teacher_user_id=current_user.user_id,
    )
    db.add(db_classroom)
    db.commit()
    db.refresh(db_classroom)
    return db_classroom
