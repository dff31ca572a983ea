import logging
import math
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from pymongo.errors import PyMongoError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.crud import progress_crud
from app.schemas.analytics_schema import (
    CalculationSummary,
    ClassAverage,
    GradeAverage,
    ProgressRow,
    SchoolAnalytics,
    SubjectAverage,
)
from app.services.analytics_store import AnalyticsStore

# Thiết lập logger
logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

# Ngưỡng phân loại điểm (theo phần trăm)
EXCELLENT_THRESHOLD = 90
GOOD_THRESHOLD = 80
SATISFACTORY_THRESHOLD = 70


class AnalyticsError(Exception):
    """Lỗi khi đọc dữ liệu nguồn hoặc ghi analytics vào document store."""


def round_half_up(value: float) -> float:
    """Làm tròn 2 chữ số thập phân, .5 luôn làm tròn lên."""
    return math.floor(value * 100 + 0.5) / 100


def percentage(score: float, max_score: Optional[float]) -> float:
    if not max_score:
        return float(score)
    return float(score) * 100 / float(max_score)


def distribution_band(score: float) -> str:
    if score >= EXCELLENT_THRESHOLD:
        return "excellent"
    if score >= GOOD_THRESHOLD:
        return "good"
    if score >= SATISFACTORY_THRESHOLD:
        return "satisfactory"
    return "needs_improvement"


def _new_school_stats(row: ProgressRow) -> dict:
    return {
        "school_id": row.school_id,
        "school_name": row.school_name or UNKNOWN,
        "students": set(),
        "teachers": set(),
        "classrooms": set(),
        "total_score": 0.0,
        "total_records": 0,
        "subjects": {},
        "grades": {},
    }


def _add_to_bucket(buckets: Dict, key, score: float):
    bucket = buckets.setdefault(key, {"total": 0.0, "count": 0})
    bucket["total"] += score
    bucket["count"] += 1


def aggregate_progress(
    rows: Iterable[ProgressRow],
    now: Optional[datetime] = None,
) -> Tuple[List[ClassAverage], List[SchoolAnalytics]]:
    """
    Tính điểm trung bình theo lớp và thống kê theo trường trong một lần duyệt.

    - Bản ghi không có classroom bị bỏ qua.
    - Điểm được quy về phần trăm (score * 100 / max_score) trước khi cộng dồn và phân loại.
    - total_students của lớp là số bản ghi; total_students của trường là số học sinh khác nhau.
    - Thứ tự kết quả theo thứ tự lớp / trường xuất hiện lần đầu.
    """
    last_updated = now or datetime.now(timezone.utc)
    class_averages: Dict[int, ClassAverage] = {}
    school_stats: Dict[Optional[int], dict] = {}

    for row in rows:
        if row.classroom_id is None:
            continue

        score = percentage(row.score, row.max_score)

        class_avg = class_averages.get(row.classroom_id)
        if class_avg is None:
            class_avg = ClassAverage(
                classroom_id=row.classroom_id,
                classroom_name=row.classroom_name or UNKNOWN,
                school_id=row.school_id,
                school_name=row.school_name or UNKNOWN,
                teacher_id=row.teacher_id,
                teacher_name=row.teacher_name or UNKNOWN,
                subject=row.subject,
                last_updated=last_updated,
            )
            class_averages[row.classroom_id] = class_avg

        class_avg.total_students += 1
        # average_score giữ tổng điểm cho đến khi chốt
        class_avg.average_score += score
        band = distribution_band(score)
        setattr(class_avg.scores_distribution, band, getattr(class_avg.scores_distribution, band) + 1)

        school = school_stats.get(row.school_id)
        if school is None:
            school = _new_school_stats(row)
            school_stats[row.school_id] = school

        school["students"].add(row.student_id)
        if row.teacher_id is not None:
            school["teachers"].add(row.teacher_id)
        school["classrooms"].add(row.classroom_id)
        school["total_score"] += score
        school["total_records"] += 1
        _add_to_bucket(school["subjects"], row.subject, score)
        if row.grade:
            _add_to_bucket(school["grades"], row.grade, score)

    for class_avg in class_averages.values():
        class_avg.average_score = round_half_up(class_avg.average_score / class_avg.total_students)

    school_analytics = [_finalize_school(school, last_updated) for school in school_stats.values()]
    return list(class_averages.values()), school_analytics


def _finalize_school(school: dict, last_updated: datetime) -> SchoolAnalytics:
    total_records = school["total_records"]
    return SchoolAnalytics(
        school_id=school["school_id"],
        school_name=school["school_name"],
        total_students=len(school["students"]),
        total_teachers=len(school["teachers"]),
        total_classrooms=len(school["classrooms"]),
        overall_average=round_half_up(school["total_score"] / total_records) if total_records else 0,
        subject_averages=[
            SubjectAverage(
                subject=subject,
                average=round_half_up(stats["total"] / stats["count"]),
                student_count=stats["count"],
            )
            for subject, stats in school["subjects"].items()
        ],
        grade_averages=[
            GradeAverage(
                grade=grade,
                average=round_half_up(stats["total"] / stats["count"]),
                student_count=stats["count"],
            )
            for grade, stats in school["grades"].items()
        ],
        last_updated=last_updated,
    )


def load_progress_rows(db: Session) -> List[ProgressRow]:
    try:
        return progress_crud.get_progress_rows_for_analytics(db)
    except SQLAlchemyError as e:
        raise AnalyticsError(f"Error fetching progress data: {e}") from e


def preview_analytics(db: Session) -> dict:
    """Tính analytics từ dữ liệu hiện tại mà không ghi vào document store."""
    rows = load_progress_rows(db)
    class_averages, school_analytics = aggregate_progress(rows)
    return {
        "class_averages": [c.model_dump(mode="json") for c in class_averages],
        "school_analytics": [s.model_dump(mode="json") for s in school_analytics],
        "totalProgressRecords": len(rows),
    }


def run_analytics(db: Session, store: AnalyticsStore) -> CalculationSummary:
    """
    Đọc toàn bộ progress, tính lại analytics và thay thế dữ liệu cũ trong document store.
    Mọi tính toán xong xuôi trước khi xóa dữ liệu cũ.
    """
    rows = load_progress_rows(db)
    logger.info(f"Found {len(rows)} progress records")

    class_averages, school_analytics = aggregate_progress(rows)

    try:
        store.replace_class_averages([c.model_dump(mode="json") for c in class_averages])
        store.replace_school_analytics([s.model_dump(mode="json") for s in school_analytics])
    except PyMongoError as e:
        raise AnalyticsError(f"Error storing analytics: {e}") from e

    logger.info(
        f"Stored {len(class_averages)} class averages and {len(school_analytics)} school analytics"
    )
    return CalculationSummary(
        classAveragesCalculated=len(class_averages),
        schoolAnalyticsCalculated=len(school_analytics),
        totalProgressRecords=len(rows),
    )
