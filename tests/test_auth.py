from conftest import PASSWORD, auth_headers, register_user


def test_register_returns_token_and_starting_coins(client):
    res = client.post(
        "/api/register",
        json={
            "username": "carol",
            "email": "carol@example.com",
            "password": PASSWORD,
            "first_name": "Carol",
        },
    )
    assert res.status_code == 201
    body = res.json()
    assert body["token"]
    assert body["user"]["coins"] == 100
    assert body["user"]["english_level"] == "beginner"
    assert body["user"]["is_admin"] is False
    assert "password" not in body["user"]


def test_register_conflicts_on_email_or_username(client):
    register_user(client, "carol")

    same_email = client.post(
        "/api/register",
        json={"username": "other", "email": "carol@example.com", "password": PASSWORD},
    )
    same_username = client.post(
        "/api/register",
        json={"username": "carol", "email": "new@example.com", "password": PASSWORD},
    )
    assert same_email.status_code == 409
    assert same_email.json()["error"] == "CONFLICT"
    assert same_username.status_code == 409


def test_register_validation_error_shape(client):
    res = client.post("/api/register", json={"username": "x", "email": "nope", "password": "1"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"]


def test_login_success_and_uniform_failures(client):
    register_user(client, "carol")

    ok = client.post("/api/login", json={"email": "carol@example.com", "password": PASSWORD})
    assert ok.status_code == 200
    assert ok.json()["user"]["username"] == "carol"

    wrong_password = client.post("/api/login", json={"email": "carol@example.com", "password": "bad-pass"})
    unknown_email = client.post("/api/login", json={"email": "ghost@example.com", "password": PASSWORD})
    assert wrong_password.status_code == 400
    assert unknown_email.status_code == 400
    assert wrong_password.json()["message"] == unknown_email.json()["message"]


def test_missing_token_is_401_and_bad_token_is_403(client):
    assert client.get("/api/profile").status_code == 401
    res = client.get("/api/profile", headers=auth_headers("not-a-jwt"))
    assert res.status_code == 403
    assert res.json()["error"] == "FORBIDDEN"


def test_admin_guard_rejects_regular_users(client, student):
    assert client.get("/api/admin/stats", headers=student["headers"]).status_code == 403
    assert client.get("/api/admin/stats").status_code == 401


def test_deactivated_user_is_locked_out(client, admin, student):
    res = client.put(
        f"/api/admin/users/{student['id']}", json={"is_active": False}, headers=admin["headers"]
    )
    assert res.status_code == 200

    assert client.get("/api/profile", headers=student["headers"]).status_code == 403
    login = client.post("/api/login", json={"email": "alice@example.com", "password": PASSWORD})
    assert login.status_code == 403


def test_request_id_header_is_echoed(client):
    res = client.get("/api/courses", headers={"X-Request-ID": "abc123"})
    assert res.headers["X-Request-ID"] == "abc123"
