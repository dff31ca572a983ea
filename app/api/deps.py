# app/api/deps.py
from typing import Callable, ContextManager, Generator
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.services.analytics_store import AnalyticsStore, open_analytics_store


def get_db() -> Generator[Session, None, None]:
    """Dependency để lấy phiên cơ sở dữ liệu."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store_opener() -> Callable[[], ContextManager[AnalyticsStore]]:
    """Dependency trả về hàm mở document store cho từng lần chạy."""
    return open_analytics_store
