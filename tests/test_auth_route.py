from app.models import RoleEnum, User
from conftest import auth_headers, make_school, make_user


def signup(client, **overrides):
    payload = {
        "email": "head@example.com",
        "password": "secure_password",
        "full_name": "Helen Head",
        "school_name": "Springfield High",
        "role": "head_teacher",
    }
    payload.update(overrides)
    return client.post("/api/v1/register/signup", json=payload)


def test_head_teacher_signup_creates_school(client, db_session):
    response = signup(client)
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User created successfully"
    assert body["role"] == "head_teacher"
    assert body["school_name"] == "Springfield High"


def test_second_head_teacher_for_same_school_is_rejected(client, db_session):
    signup(client)
    response = signup(client, email="other@example.com")
    assert response.status_code == 400
    assert response.json()["detail"] == "School already exists with a head teacher"


def test_student_signup_requires_existing_school(client, db_session):
    response = signup(client, email="kid@example.com", role="student", school_name="Nowhere High", grade="10th")
    assert response.status_code == 400
    assert response.json()["detail"] == "School not found"

    signup(client)
    response = signup(client, email="kid@example.com", role="student", grade="10th")
    assert response.status_code == 201

    student = db_session.query(User).filter(User.email == "kid@example.com").first()
    assert student.role == RoleEnum.student
    assert student.grade == "10th"


def test_signup_rejects_invalid_role_and_duplicate_email(client, db_session):
    response = signup(client, role="principal")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid role"

    signup(client)
    response = signup(client, role="teacher")
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_signup_validates_payload(client, db_session):
    assert signup(client, password="short").status_code == 422
    assert signup(client, email="not-an-email").status_code == 422
    assert signup(client, role="student", grade="13th").status_code == 422


def test_login_me_refresh_and_logout(client, db_session):
    school = make_school(db_session)
    make_user(db_session, school, RoleEnum.teacher, email="teacher@example.com", password="secure_password")

    response = client.post("/api/v1/auth/login", json={"email": "teacher@example.com", "password": "secure_password"})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["roles"] == ["teacher"]
    assert body["school_id"] == school.school_id
    refresh_cookie = response.cookies.get("refresh_token")
    assert refresh_cookie

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "teacher@example.com"
    assert me.json()["roles"] == ["teacher"]

    refreshed = client.post("/api/v1/auth/refresh")
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]

    assert client.post("/api/v1/auth/logout").status_code == 200

    # Token đã bị revoke không dùng lại được
    client.cookies.set("refresh_token", refresh_cookie)
    assert client.post("/api/v1/auth/refresh").status_code == 401


def test_login_with_wrong_password(client, db_session):
    school = make_school(db_session)
    make_user(db_session, school, RoleEnum.student, email="s@example.com", password="secure_password")

    response = client.post("/api/v1/auth/login", json={"email": "s@example.com", "password": "wrong_password"})
    assert response.status_code == 401


def test_invalid_token_is_rejected(client, db_session):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_token_for_deleted_user_is_rejected(client, db_session):
    school = make_school(db_session)
    user = make_user(db_session, school, RoleEnum.student)
    headers = auth_headers(user)
    db_session.delete(user)
    db_session.commit()

    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401
