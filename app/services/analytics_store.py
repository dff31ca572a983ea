import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from pymongo import MongoClient

from app import config

logger = logging.getLogger(__name__)

CLASS_AVERAGES = "class_averages"
SCHOOL_ANALYTICS = "school_analytics"


class AnalyticsStore:
    """
    Truy cập hai collection analytics trên một database MongoDB đã mở.
    Không giữ kết nối: vòng đời client do open_analytics_store quản lý.
    """

    def __init__(self, database):
        self.database = database

    def _replace_all(self, name: str, documents: List[Dict[str, Any]]) -> None:
        collection = self.database[name]
        collection.delete_many({})
        if documents:
            # insert_many gắn _id vào document, nên truyền bản sao
            collection.insert_many([dict(doc) for doc in documents])

    def replace_class_averages(self, documents: List[Dict[str, Any]]) -> None:
        self._replace_all(CLASS_AVERAGES, documents)

    def replace_school_analytics(self, documents: List[Dict[str, Any]]) -> None:
        self._replace_all(SCHOOL_ANALYTICS, documents)

    def find_class_averages(
        self, school_id: Optional[int] = None, teacher_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if school_id is not None:
            query["school_id"] = school_id
        if teacher_id is not None:
            query["teacher_id"] = teacher_id
        return list(self.database[CLASS_AVERAGES].find(query, {"_id": 0}))

    def find_school_analytics(self, school_id: Optional[int] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if school_id is not None:
            query["school_id"] = school_id
        return list(self.database[SCHOOL_ANALYTICS].find(query, {"_id": 0}))


@contextmanager
def open_analytics_store(uri: Optional[str] = None, db_name: Optional[str] = None) -> Iterator[AnalyticsStore]:
    """
    Mở kết nối MongoDB cho một lần chạy và luôn đóng khi kết thúc.
    Thiếu MONGODB_URI thì báo lỗi ngay, trước khi làm bất cứ việc gì.
    """
    uri = uri or config.MONGODB_URI or config.require_setting("MONGODB_URI")
    client = MongoClient(uri, serverSelectionTimeoutMS=5000)
    try:
        yield AnalyticsStore(client[db_name or config.MONGODB_DB_NAME])
    finally:
        client.close()
        logger.debug("MongoDB client closed")
