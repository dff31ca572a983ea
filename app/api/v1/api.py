# app/api/v1/api.py
from fastapi import APIRouter

from app.api.v1.endpoints.auth_route import router as auth_router
from app.api.v1.endpoints.register_route import router as register_router
from app.api.v1.endpoints.user_route import router as user_router
from app.api.v1.endpoints.classroom_route import router as classroom_router
from app.api.v1.endpoints.progress_route import router as progress_router
from app.api.v1.endpoints.analytics_route import router as analytics_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Login"])
api_router.include_router(register_router, prefix="/register", tags=["Register"])
api_router.include_router(user_router, prefix="/users", tags=["Users"])
api_router.include_router(classroom_router, prefix="/classrooms", tags=["Classrooms"])
api_router.include_router(progress_router, prefix="/progress", tags=["Progress"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])
