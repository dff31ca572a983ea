from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.api import deps
from app.api.auth.auth import has_roles, get_current_active_user
from app.crud import classroom_crud
from app.schemas import classroom_schema
from app.schemas.auth_schema import AuthenticatedUser

router = APIRouter()

TEACHER_OR_HEAD = Depends(has_roles(["teacher", "head_teacher"]))


@router.get(
    "",
    response_model=List[classroom_schema.Classroom],
    summary="Lấy danh sách lớp theo vai trò",
)
def get_classrooms(
    db: Session = Depends(deps.get_db),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    return classroom_crud.get_classrooms_for_user(db, current_user)


@router.post(
    "",
    response_model=classroom_schema.Classroom,
    status_code=status.HTTP_201_CREATED,
    summary="Tạo lớp mới trong trường của người dùng",
    dependencies=[TEACHER_OR_HEAD],
)
def create_classroom(
    classroom_in: classroom_schema.ClassroomCreate,
    db: Session = Depends(deps.get_db),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    return classroom_crud.create_classroom(db, classroom_in, current_user)
