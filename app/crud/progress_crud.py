from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session, aliased
from typing import List, Optional

from app.models.progress_model import Progress
from app.models.classroom_model import Classroom
from app.models.school_model import School
from app.models.user_model import User, RoleEnum
from app.schemas.auth_schema import AuthenticatedUser
from app.schemas.progress_schema import ProgressCreate, ProgressUpdate
from app.schemas.analytics_schema import ProgressRow


def can_manage_classroom(current_user: AuthenticatedUser, classroom: Classroom) -> bool:
    """Giáo viên quản lý lớp mình dạy; hiệu trưởng quản lý mọi lớp trong trường."""
    if "head_teacher" in current_user.roles:
        return classroom.school_id == current_user.school_id
    if "teacher" in current_user.roles:
        return classroom.teacher_user_id == current_user.user_id
    return False


def _scope_to_user(stmt, current_user: AuthenticatedUser):
    # Lọc theo vai trò, tương đương chính sách row-level security trên bảng progress
    if "head_teacher" in current_user.roles:
        return stmt.where(Progress.school_id == current_user.school_id)
    if "teacher" in current_user.roles:
        return stmt.join(Classroom, Progress.classroom_id == Classroom.classroom_id).where(
            Classroom.teacher_user_id == current_user.user_id
        )
    return stmt.where(Progress.student_user_id == current_user.user_id)


def get_progress_for_user(
    db: Session, current_user: AuthenticatedUser, skip: int = 0, limit: int = 100
) -> List[Progress]:
    stmt = _scope_to_user(select(Progress), current_user)
    stmt = stmt.order_by(Progress.created_at.desc(), Progress.progress_id.desc()).offset(skip).limit(limit)
    return db.execute(stmt).scalars().all()


def get_progress(db: Session, progress_id: int, current_user: AuthenticatedUser) -> Optional[Progress]:
    stmt = _scope_to_user(select(Progress), current_user).where(Progress.progress_id == progress_id)
    return db.execute(stmt).scalars().first()


def create_progress(db: Session, progress_in: ProgressCreate, current_user: AuthenticatedUser) -> Progress:
    db_classroom = db.get(Classroom, progress_in.classroom_id)
    if not db_classroom:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Classroom not found")

    if not can_manage_classroom(current_user, db_classroom):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User {current_user.user_id} cannot record progress for classroom {db_classroom.classroom_id}",
        )

    db_student = db.get(User, progress_in.student_user_id)
    if (
        not db_student
        or db_student.role != RoleEnum.student
        or db_student.school_id != db_classroom.school_id
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Student {progress_in.student_user_id} not found in this school",
        )

    db_progress = Progress(
        student_user_id=progress_in.student_user_id,
        classroom_id=db_classroom.classroom_id,
        school_id=db_classroom.school_id,
        subject=progress_in.subject,
        score=progress_in.score,
        max_score=progress_in.max_score,
        created_by=current_user.user_id,
    )
    db.add(db_progress)
    db.commit()
    db.refresh(db_progress)
    return db_progress


def update_progress(
    db: Session, progress_id: int, progress_update: ProgressUpdate, current_user: AuthenticatedUser
) -> Optional[Progress]:
    db_progress = get_progress(db, progress_id, current_user)
    if not db_progress:
        return None

    if not can_manage_classroom(current_user, db_progress.classroom):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    update_data = progress_update.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    if "score" in update_data and update_data["score"] > float(db_progress.max_score):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Score must be at most max_score")

    for key, value in update_data.items():
        setattr(db_progress, key, value)

    db.commit()
    db.refresh(db_progress)
    return db_progress


def delete_progress(db: Session, progress_id: int, current_user: AuthenticatedUser) -> Optional[Progress]:
    db_progress = get_progress(db, progress_id, current_user)
    if not db_progress:
        return None

    if not can_manage_classroom(current_user, db_progress.classroom):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    db.delete(db_progress)
    db.commit()
    return db_progress


def get_progress_rows_for_analytics(db: Session) -> List[ProgressRow]:
    """
    Lấy toàn bộ progress kèm thông tin lớp, trường, giáo viên và khối lớp học sinh trong 1 truy vấn.
    LEFT JOIN để bản ghi mất classroom vẫn được trả về (bộ tổng hợp sẽ bỏ qua).
    """
    Teacher = aliased(User)
    Student = aliased(User)

    stmt = (
        select(
            Progress.student_user_id.label("student_id"),
            Classroom.classroom_id,
            Classroom.name.label("classroom_name"),
            Classroom.school_id,
            School.name.label("school_name"),
            Classroom.teacher_user_id.label("teacher_id"),
            Teacher.full_name.label("teacher_name"),
            Classroom.subject.label("classroom_subject"),
            Progress.subject.label("progress_subject"),
            Progress.score,
            Progress.max_score,
            Student.grade,
        )
        .outerjoin(Classroom, Progress.classroom_id == Classroom.classroom_id)
        .outerjoin(School, Classroom.school_id == School.school_id)
        .outerjoin(Teacher, Classroom.teacher_user_id == Teacher.user_id)
        .outerjoin(Student, Progress.student_user_id == Student.user_id)
        .order_by(Progress.progress_id)
    )

    rows = []
    for row in db.execute(stmt).all():
        data = row._asdict()
        # Môn học lấy theo lớp, lớp chưa gán môn thì dùng môn của bản ghi
        classroom_subject = data.pop("classroom_subject")
        progress_subject = data.pop("progress_subject")
        data["subject"] = classroom_subject or progress_subject
        data["score"] = float(data["score"])
        data["max_score"] = float(data["max_score"]) if data["max_score"] is not None else 100
        rows.append(ProgressRow.model_validate(data))
    return rows
