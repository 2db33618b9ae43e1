import json

import pytest
from fastapi.testclient import TestClient

from app.core.settings import settings
from app.main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-secret"
PASSWORD = "secret123"

FIVE_QUESTIONS = [
    {"question": "I ___ a student.", "options": ["am", "is", "are"], "correct_answer": 0},
    {"question": "She ___ tea.", "options": ["drink", "drinks", "drinking"], "correct_answer": 1},
    {"question": "They ___ here.", "options": ["is", "am", "are"], "correct_answer": 2},
    {"question": "Plural of mouse?", "options": ["mouses", "mousen", "meese", "mice"], "correct_answer": 3},
    {"question": "Opposite of hot?", "options": ["cold", "warm"], "correct_answer": 0},
]
CORRECT = [0, 1, 2, 3, 0]


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_ASYNC_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "PUBLIC_DIR", str(tmp_path / "public"))
    monkeypatch.setattr(settings, "ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setattr(settings, "SEED_DEMO_COURSES", False)
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(settings, "DB_RETRY_DELAY_SECONDS", 0.0)

    with TestClient(create_app()) as test_client:
        yield test_client


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_user(client: TestClient, username: str, **extra) -> dict:
    payload = {
        "username": username,
        "email": f"{username}@example.com",
        "password": PASSWORD,
        "first_name": username.capitalize(),
        "last_name": "Tester",
        **extra,
    }
    res = client.post("/api/register", json=payload)
    assert res.status_code == 201, res.text
    body = res.json()
    return {
        "id": body["user"]["id"],
        "token": body["token"],
        "headers": auth_headers(body["token"]),
    }


def balance(client: TestClient, user: dict) -> int:
    res = client.get("/api/wallet", headers=user["headers"])
    assert res.status_code == 200, res.text
    return res.json()["coins"]


def create_course(
    client: TestClient,
    teacher: dict,
    title: str = "Everyday English",
    price: int = 0,
    lessons: list | None = None,
    quizzes: list | None = None,
    **fields,
) -> str:
    if lessons is None:
        lessons = [
            {"title": "Greetings", "content": "Hello, how are you?", "duration": 30},
            {"title": "Introductions", "content": "My name is John.", "duration": 45},
        ]
    data = {"title": title, "price": str(price), "lessons": json.dumps(lessons), **fields}
    if quizzes is not None:
        data["quizzes"] = json.dumps(quizzes)
    res = client.post("/api/courses", data=data, headers=teacher["headers"])
    assert res.status_code == 201, res.text
    return res.json()["course"]["id"]


def approve(client: TestClient, admin: dict, course_id: str, approved: bool = True):
    res = client.post(
        f"/api/admin/courses/{course_id}/approve",
        json={"approved": approved},
        headers=admin["headers"],
    )
    assert res.status_code == 200, res.text


@pytest.fixture
def admin(client):
    res = client.post("/api/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert res.status_code == 200, res.text
    body = res.json()
    return {"id": body["user"]["id"], "token": body["token"], "headers": auth_headers(body["token"])}


@pytest.fixture
def student(client):
    return register_user(client, "alice")


@pytest.fixture
def other_student(client):
    return register_user(client, "bob")


@pytest.fixture
def course(client, admin):
    """Approved free course: two lessons, a five-question quiz on the first lesson."""
    course_id = create_course(
        client,
        admin,
        quizzes=[{"lesson_index": 0, "questions": FIVE_QUESTIONS}],
    )
    approve(client, admin, course_id)
    detail = client.get(f"/api/courses/{course_id}").json()
    return {
        "id": course_id,
        "lesson_ids": [lesson["id"] for lesson in detail["lessons"]],
        "quiz_id": detail["quizzes"][0]["id"],
    }


@pytest.fixture
def enrolled(client, student, course):
    res = client.post(f"/api/courses/{course['id']}/enroll", headers=student["headers"])
    assert res.status_code == 200, res.text
    return course
