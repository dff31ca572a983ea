import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api import deps
from app.api.auth.auth import has_roles, get_current_active_user
from app.schemas.auth_schema import AuthenticatedUser
from app.services import analytics_service

logger = logging.getLogger(__name__)

router = APIRouter()

TEACHER_OR_HEAD = Depends(has_roles(["teacher", "head_teacher"]))


@router.post(
    "/calculate",
    summary="Tính lại analytics và ghi đè vào document store",
    dependencies=[TEACHER_OR_HEAD],
)
def calculate_analytics(
    db: Session = Depends(deps.get_db),
    open_store=Depends(deps.get_store_opener),
):
    try:
        with open_store() as store:
            summary = analytics_service.run_analytics(db, store)
    except Exception as e:
        logger.error(f"Analytics calculation error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {
        "success": True,
        "message": "Analytics calculated and stored successfully",
        "data": summary.model_dump(),
    }


@router.post(
    "/preview",
    summary="Tính analytics từ dữ liệu hiện tại mà không ghi vào document store",
    dependencies=[TEACHER_OR_HEAD],
)
def preview_analytics(db: Session = Depends(deps.get_db)):
    try:
        data = analytics_service.preview_analytics(db)
    except analytics_service.AnalyticsError as e:
        logger.error(f"Analytics preview error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return {"success": True, "data": data}


@router.get(
    "",
    summary="Đọc analytics đã tính (class_averages hoặc school_analytics)",
)
def get_analytics(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    type: str = Query("class_averages"),
    school_id: Optional[int] = Query(None),
    teacher_id: Optional[int] = Query(None),
    open_store=Depends(deps.get_store_opener),
):
    if type not in ("class_averages", "school_analytics"):
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid analytics type"})

    # Học sinh chỉ xem analytics của trường mình
    if "student" in current_user.roles:
        school_id = current_user.school_id

    try:
        with open_store() as store:
            if type == "class_averages":
                data = store.find_class_averages(school_id=school_id, teacher_id=teacher_id)
            else:
                data = store.find_school_analytics(school_id=school_id)
    except Exception as e:
        logger.error(f"Analytics API error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to fetch analytics data"})

    return {"success": True, "data": data}
