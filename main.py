# main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
from apscheduler.schedulers.asyncio import AsyncIOScheduler # type: ignore
from apscheduler.triggers.cron import CronTrigger # type: ignore
from fastapi.middleware.cors import CORSMiddleware
from app.api.v1.api import api_router
from app.config import ANALYTICS_CRON, CORS_ORIGINS, ENABLE_SCHEDULER
from app.database import Base, engine, SessionLocal
from app.models import *
from app.services import analytics_service
from app.services.analytics_store import open_analytics_store
import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logging.getLogger('apscheduler').setLevel(logging.INFO)
logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

def run_analytics_task():
    """Tác vụ tính lại analytics, chạy định kỳ."""
    db = SessionLocal()
    try:
        with open_analytics_store() as store:
            summary = analytics_service.run_analytics(db, store)
        logger.info(f"Scheduled analytics run finished: {summary.model_dump()}")
    except Exception as e:
        logger.error(f"Scheduled analytics run failed: {e}", exc_info=True)
    finally:
        db.close()

@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    if ENABLE_SCHEDULER:
        scheduler.add_job(
            run_analytics_task,
            trigger=CronTrigger.from_crontab(ANALYTICS_CRON),
            id="analytics_job",
            name="Recalculate Analytics",
            replace_existing=True,
        )
        scheduler.start()
        logger.info("Scheduler started")

    yield

    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")

app = FastAPI(
    title="School Progress API",
    description="API theo dõi tiến độ học tập và thống kê theo lớp / trường.",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")

@app.get("/")
def read_root():
    return {"message": "Welcome to the School Progress API! Visit /docs for API documentation."}
