from pymongo.errors import PyMongoError
from sqlalchemy.exc import SQLAlchemyError

from app.crud import progress_crud
from app.models import RoleEnum
from app.services.analytics_store import CLASS_AVERAGES, SCHOOL_ANALYTICS
from conftest import auth_headers, make_school, make_user, make_classroom, make_progress


def seed(db):
    school = make_school(db, "Test School")
    smith = make_user(db, school, RoleEnum.teacher, full_name="Mr. Smith")
    johnson = make_user(db, school, RoleEnum.teacher, full_name="Ms. Johnson")
    head = make_user(db, school, RoleEnum.head_teacher, full_name="Head Teacher")
    john = make_user(db, school, RoleEnum.student, full_name="John Doe", grade="10th")
    jane = make_user(db, school, RoleEnum.student, full_name="Jane Smith", grade="10th")
    bob = make_user(db, school, RoleEnum.student, full_name="Bob Wilson", grade="11th")

    math = make_classroom(db, school, smith, "Math 101", "Mathematics")
    science = make_classroom(db, school, johnson, "Science 101", "Science")
    make_classroom(db, school, johnson, "Empty Room", "History")

    make_progress(db, john, math, 85)
    make_progress(db, jane, math, 92)
    make_progress(db, bob, science, 78)
    return {"school": school, "smith": smith, "johnson": johnson, "head": head, "john": john,
            "math": math, "science": science}


def test_calculate_stores_class_and_school_analytics(client, db_session, fake_mongo):
    data = seed(db_session)

    response = client.post("/api/v1/analytics/calculate", headers=auth_headers(data["head"]))
    assert response.status_code == 200
    body = response.json()
    assert body == {
        "success": True,
        "message": "Analytics calculated and stored successfully",
        "data": {"classAveragesCalculated": 2, "schoolAnalyticsCalculated": 1, "totalProgressRecords": 3},
    }

    class_docs = {d["classroom_id"]: d for d in fake_mongo[CLASS_AVERAGES].documents}
    math = class_docs[data["math"].classroom_id]
    assert math["average_score"] == 88.5
    assert math["total_students"] == 2
    assert math["teacher_name"] == "Mr. Smith"
    assert math["school_name"] == "Test School"
    assert math["scores_distribution"] == {"excellent": 1, "good": 1, "satisfactory": 0, "needs_improvement": 0}
    # Lớp không có bản ghi nào không xuất hiện
    assert len(class_docs) == 2

    school_doc = fake_mongo[SCHOOL_ANALYTICS].documents[0]
    assert school_doc["overall_average"] == 85.0
    assert school_doc["total_classrooms"] == 2
    assert school_doc["total_students"] == 3
    assert school_doc["total_teachers"] == 2
    assert isinstance(school_doc["last_updated"], str)


def test_calculate_replaces_previous_run(client, db_session, fake_mongo):
    data = seed(db_session)
    fake_mongo[CLASS_AVERAGES].insert_many([{"classroom_id": 999, "school_id": 42}])

    response = client.post("/api/v1/analytics/calculate", headers=auth_headers(data["smith"]))
    assert response.status_code == 200
    assert 999 not in [d["classroom_id"] for d in fake_mongo[CLASS_AVERAGES].documents]


def test_calculate_with_no_records(client, db_session, fake_mongo):
    school = make_school(db_session)
    head = make_user(db_session, school, RoleEnum.head_teacher)

    response = client.post("/api/v1/analytics/calculate", headers=auth_headers(head))
    assert response.status_code == 200
    assert response.json()["data"] == {
        "classAveragesCalculated": 0, "schoolAnalyticsCalculated": 0, "totalProgressRecords": 0,
    }
    assert fake_mongo[CLASS_AVERAGES].documents == []


def test_calculate_forbidden_for_students(client, db_session):
    data = seed(db_session)
    response = client.post("/api/v1/analytics/calculate", headers=auth_headers(data["john"]))
    assert response.status_code == 403


def test_calculate_reports_fetch_failure(client, db_session, fake_mongo, monkeypatch):
    data = seed(db_session)

    def broken_fetch(db):
        raise SQLAlchemyError("connection refused")

    monkeypatch.setattr(progress_crud, "get_progress_rows_for_analytics", broken_fetch)

    response = client.post("/api/v1/analytics/calculate", headers=auth_headers(data["head"]))
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "Error fetching progress data" in body["error"]
    assert fake_mongo[CLASS_AVERAGES].documents == []


def test_calculate_reports_store_failure(client, db_session, fake_mongo, monkeypatch):
    data = seed(db_session)

    def broken_insert(documents):
        raise PyMongoError("write concern error")

    monkeypatch.setattr(fake_mongo[SCHOOL_ANALYTICS], "insert_many", broken_insert)

    response = client.post("/api/v1/analytics/calculate", headers=auth_headers(data["head"]))
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "write concern error" in body["error"]


def test_calculate_fails_fast_when_store_is_not_configured(client, db_session, monkeypatch):
    from app.api.deps import get_store_opener
    from main import app

    data = seed(db_session)
    fetched = []
    monkeypatch.setattr(progress_crud, "get_progress_rows_for_analytics", lambda db: fetched.append(db) or [])

    def missing_config_opener():
        raise RuntimeError('Invalid/Missing environment variable: "MONGODB_URI"')

    app.dependency_overrides[get_store_opener] = lambda: missing_config_opener

    response = client.post("/api/v1/analytics/calculate", headers=auth_headers(data["head"]))
    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": 'Invalid/Missing environment variable: "MONGODB_URI"',
    }
    assert fetched == []


def test_preview_does_not_touch_store(client, db_session, fake_mongo):
    data = seed(db_session)

    response = client.post("/api/v1/analytics/preview", headers=auth_headers(data["smith"]))
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["totalProgressRecords"] == 3
    assert len(body["data"]["class_averages"]) == 2
    assert body["data"]["school_analytics"][0]["overall_average"] == 85.0
    assert fake_mongo.collections == {}


def test_read_class_averages_with_filters(client, db_session):
    data = seed(db_session)
    headers = auth_headers(data["head"])
    client.post("/api/v1/analytics/calculate", headers=headers)

    response = client.get("/api/v1/analytics", headers=headers)
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(response.json()["data"]) == 2

    response = client.get(
        "/api/v1/analytics",
        params={"type": "class_averages", "teacher_id": data["smith"].user_id},
        headers=headers,
    )
    docs = response.json()["data"]
    assert [d["classroom_name"] for d in docs] == ["Math 101"]
    assert "_id" not in docs[0]

    response = client.get("/api/v1/analytics", params={"school_id": 12345}, headers=headers)
    assert response.json() == {"success": True, "data": []}


def test_read_school_analytics(client, db_session):
    data = seed(db_session)
    client.post("/api/v1/analytics/calculate", headers=auth_headers(data["head"]))

    response = client.get(
        "/api/v1/analytics",
        params={"type": "school_analytics", "school_id": data["school"].school_id},
        headers=auth_headers(data["john"]),
    )
    assert response.status_code == 200
    docs = response.json()["data"]
    assert len(docs) == 1
    assert docs[0]["school_name"] == "Test School"
    subjects = {s["subject"]: s["average"] for s in docs[0]["subject_averages"]}
    assert subjects == {"Mathematics": 88.5, "Science": 78.0}


def test_read_rejects_unknown_type(client, db_session):
    data = seed(db_session)
    response = client.get("/api/v1/analytics", params={"type": "teacher_analytics"},
                          headers=auth_headers(data["head"]))
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid analytics type"}


def test_read_reports_store_failure(client, db_session, fake_mongo, monkeypatch):
    data = seed(db_session)

    def broken_find(query=None, projection=None):
        raise PyMongoError("server selection timeout")

    monkeypatch.setattr(fake_mongo[CLASS_AVERAGES], "find", broken_find)

    response = client.get("/api/v1/analytics", headers=auth_headers(data["head"]))
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to fetch analytics data"}


def test_students_only_read_their_own_school(client, db_session):
    data = seed(db_session)
    other = make_school(db_session, "Other School")
    other_teacher = make_user(db_session, other, RoleEnum.teacher)
    other_student = make_user(db_session, other, RoleEnum.student, grade="12th")
    other_room = make_classroom(db_session, other, other_teacher, "Other Math")
    make_progress(db_session, other_student, other_room, 60)

    client.post("/api/v1/analytics/calculate", headers=auth_headers(data["head"]))
    student_headers = auth_headers(data["john"])

    response = client.get("/api/v1/analytics", headers=student_headers)
    assert {d["school_id"] for d in response.json()["data"]} == {data["school"].school_id}

    response = client.get("/api/v1/analytics", params={"school_id": other.school_id}, headers=student_headers)
    assert {d["school_id"] for d in response.json()["data"]} == {data["school"].school_id}

    response = client.get("/api/v1/analytics", params={"type": "school_analytics"}, headers=student_headers)
    assert [d["school_name"] for d in response.json()["data"]] == ["Test School"]

    # Giáo viên / hiệu trưởng vẫn lọc tự do
    response = client.get("/api/v1/analytics", params={"school_id": other.school_id},
                          headers=auth_headers(data["head"]))
    assert [d["classroom_name"] for d in response.json()["data"]] == ["Other Math"]
