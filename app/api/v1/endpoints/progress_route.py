from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from app.api import deps
from app.api.auth.auth import has_roles, get_current_active_user
from app.crud import progress_crud
from app.schemas import progress_schema
from app.schemas.auth_schema import AuthenticatedUser

router = APIRouter()

# Chỉ giáo viên hoặc hiệu trưởng được nhập / sửa điểm
TEACHER_OR_HEAD = Depends(has_roles(["teacher", "head_teacher"]))


@router.get(
    "",
    response_model=List[progress_schema.Progress],
    summary="Lấy bản ghi progress (áp dụng phân quyền theo vai trò)",
)
def get_all_progress(
    db: Session = Depends(deps.get_db),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """
    Học sinh: bản ghi của chính mình. Giáo viên: các lớp mình dạy. Hiệu trưởng: toàn trường.
    """
    return progress_crud.get_progress_for_user(db, current_user, skip=skip, limit=limit)


@router.get(
    "/{progress_id}",
    response_model=progress_schema.Progress,
    summary="Lấy một bản ghi progress theo ID",
)
def get_progress(
    progress_id: int,
    db: Session = Depends(deps.get_db),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    db_progress = progress_crud.get_progress(db, progress_id, current_user)
    if db_progress is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Progress record not found")
    return db_progress


@router.post(
    "",
    response_model=progress_schema.Progress,
    status_code=status.HTTP_201_CREATED,
    summary="Nhập điểm cho học sinh",
    dependencies=[TEACHER_OR_HEAD],
)
def create_progress(
    progress_in: progress_schema.ProgressCreate,
    db: Session = Depends(deps.get_db),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    return progress_crud.create_progress(db, progress_in, current_user)


@router.put(
    "/{progress_id}",
    response_model=progress_schema.Progress,
    summary="Cập nhật điểm hoặc môn học",
    dependencies=[TEACHER_OR_HEAD],
)
def update_progress(
    progress_id: int,
    progress_update: progress_schema.ProgressUpdate,
    db: Session = Depends(deps.get_db),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    updated = progress_crud.update_progress(db, progress_id, progress_update, current_user)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Progress record not found")
    return updated


@router.delete(
    "/{progress_id}",
    summary="Xóa một bản ghi progress",
    dependencies=[TEACHER_OR_HEAD],
)
def delete_progress(
    progress_id: int,
    db: Session = Depends(deps.get_db),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    deleted = progress_crud.delete_progress(db, progress_id, current_user)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Progress record not found")
    return {
        "message": "Progress record deleted successfully",
        "deleted_progress_id": deleted.progress_id,
    }
