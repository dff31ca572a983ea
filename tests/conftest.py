import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from contextlib import contextmanager
from copy import deepcopy

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db, get_store_opener
from app.api.auth.auth import create_access_token
from app.database import Base
from app.models import School, User, RoleEnum, Classroom, Progress
from app.services.analytics_store import AnalyticsStore
from main import app

# SQLite In-Memory (DB ảo) dùng chung một kết nối
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeCollection:
    """Collection trong bộ nhớ, đủ cho delete_many / insert_many / find với truy vấn so khớp bằng."""

    def __init__(self):
        self.documents = []
        self._next_id = 1

    @staticmethod
    def _matches(document, query):
        return all(document.get(key) == value for key, value in query.items())

    def delete_many(self, query):
        self.documents = [d for d in self.documents if not self._matches(d, query)]

    def insert_many(self, documents):
        for document in documents:
            document["_id"] = self._next_id
            self._next_id += 1
            self.documents.append(deepcopy(document))

    def find(self, query=None, projection=None):
        for document in self.documents:
            if self._matches(document, query or {}):
                result = deepcopy(document)
                if projection and projection.get("_id") == 0:
                    result.pop("_id", None)
                yield result


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_mongo():
    return FakeDatabase()


@pytest.fixture
def client(db_session, fake_mongo):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def open_fake_store():
        yield AnalyticsStore(fake_mongo)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_store_opener] = lambda: open_fake_store

    # Không dùng "with" để lifespan (scheduler, create_all trên Postgres) không chạy
    yield TestClient(app)

    app.dependency_overrides.clear()


def auth_headers(user):
    token = create_access_token({"sub": str(user.user_id)})
    return {"Authorization": f"Bearer {token}"}


def make_school(db, name="Springfield High"):
    school = School(name=name)
    db.add(school)
    db.commit()
    db.refresh(school)
    return school


def make_user(db, school, role=RoleEnum.student, email=None, full_name=None, grade=None, password=None):
    user = User(
        email=email or f"{role.value}{db.query(User).count() + 1}@example.com",
        full_name=full_name or f"{role.value.title()} {db.query(User).count() + 1}",
        role=role,
        school_id=school.school_id,
        grade=grade,
        password="not-a-real-hash",
    )
    if password:
        user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_classroom(db, school, teacher, name="Math 101", subject="Mathematics"):
    classroom = Classroom(
        name=name,
        subject=subject,
        school_id=school.school_id,
        teacher_user_id=teacher.user_id if teacher else None,
    )
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    return classroom


def make_progress(db, student, classroom, score, max_score=100, subject=None, created_by=None):
    progress = Progress(
        student_user_id=student.user_id,
        classroom_id=classroom.classroom_id,
        school_id=classroom.school_id,
        subject=subject or classroom.subject or "General",
        score=score,
        max_score=max_score,
        created_by=created_by.user_id if created_by else classroom.teacher_user_id,
    )
    db.add(progress)
    db.commit()
    db.refresh(progress)
    return progress
