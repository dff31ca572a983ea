from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.school_model import School


def get_school(db: Session, school_id: int) -> Optional[School]:
    return db.get(School, school_id)


def get_school_by_name(db: Session, name: str) -> Optional[School]:
    stmt = select(School).where(School.name == name)
    return db.execute(stmt).scalars().first()


def create_school(db: Session, name: str) -> School:
    db_school = School(name=name)
    db.add(db_school)
    db.flush()
    return db_school
