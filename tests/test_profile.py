from conftest import register_user


def test_profile_hides_password_and_includes_friends(client, student, other_student):
    client.post("/api/friends", json={"friend_id": other_student["id"]}, headers=student["headers"])

    res = client.get("/api/profile", headers=student["headers"])
    assert res.status_code == 200
    body = res.json()
    assert body["email"] == "alice@example.com"
    assert "password" not in body
    assert [f["id"] for f in body["friends"]] == [other_student["id"]]
    assert "progress" not in body


def test_profile_include_progress_and_all_users(client, student, enrolled):
    res = client.get("/api/profile?include=progress,allUsers", headers=student["headers"])
    body = res.json()
    assert len(body["progress"]) == 1
    assert body["progress"][0]["course"]["id"] == enrolled["id"]
    assert {u["username"] for u in body["all_users"]} >= {"admin", "alice"}


def test_update_profile_only_changes_sent_fields(client, student):
    res = client.put(
        "/api/profile",
        data={"bio": "I like grammar", "english_level": "intermediate"},
        headers=student["headers"],
    )
    assert res.status_code == 200
    user = res.json()["user"]
    assert user["bio"] == "I like grammar"
    assert user["english_level"] == "intermediate"
    assert user["first_name"] == "Alice"


def test_avatar_upload_is_served(client, student):
    res = client.put(
        "/api/profile",
        files={"avatar": ("my photo.png", b"\x89PNG fake", "image/png")},
        headers=student["headers"],
    )
    assert res.status_code == 200
    avatar = res.json()["user"]["avatar"]
    assert avatar.startswith("/uploads/avatars/")
    assert avatar.endswith("-my-photo.png")
    assert client.get(avatar).content == b"\x89PNG fake"


def test_avatar_must_be_an_image(client, student):
    res = client.put(
        "/api/profile",
        files={"avatar": ("notes.txt", b"hello", "text/plain")},
        headers=student["headers"],
    )
    assert res.status_code == 400


def test_profile_read_does_not_change_rating(client):
    user = register_user(client, "dave")
    first = client.get("/api/profile", headers=user["headers"]).json()["rating"]
    second = client.get("/api/profile", headers=user["headers"]).json()["rating"]
    assert first == second == 0
