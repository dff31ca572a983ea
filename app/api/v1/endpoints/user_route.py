from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from app.api import deps
from app.api.auth.auth import has_roles
from app.crud import user_crud
from app.schemas.auth_schema import AuthenticatedUser
from app.schemas.user_schema import UserOut

router = APIRouter()


@router.get(
    "/students",
    response_model=List[UserOut],
    summary="Danh sách học sinh trong trường của giáo viên / hiệu trưởng",
)
def get_students(
    db: Session = Depends(deps.get_db),
    current_user: AuthenticatedUser = Depends(has_roles(["teacher", "head_teacher"])),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    return user_crud.get_students_by_school(db, current_user.school_id, skip=skip, limit=limit)
