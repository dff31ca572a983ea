from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.user_model import User, RoleEnum


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalars().first()


def create_user(
    db: Session,
    email: str,
    password: str,
    full_name: str,
    role: RoleEnum,
    school_id: int,
    grade: Optional[str] = None,
) -> User:
    db_user = User(
        email=email,
        full_name=full_name,
        role=role,
        school_id=school_id,
        grade=grade,
    )
    db_user.set_password(password)
    db.add(db_user)
    db.flush()
    return db_user


def get_students_by_school(db: Session, school_id: int, skip: int = 0, limit: int = 100) -> List[User]:
    """Lấy danh sách học sinh của một trường."""
    stmt = (
        select(User)
        .where(User.school_id == school_id, User.role == RoleEnum.student)
        .order_by(User.full_name)
        .offset(skip)
        .limit(limit)
    )
    return db.execute(stmt).scalars().all()
