from conftest import approve, balance, create_course, register_user


def test_admin_routes_reject_students(client, student):
    for url in ("/api/admin/stats", "/api/admin/users", "/api/admin/courses", "/api/admin/payments"):
        assert client.get(url, headers=student["headers"]).status_code == 403


def test_stats_and_revenue_after_purchase(client, admin, student):
    course_id = create_course(client, admin, title="Paid English", price=40, level="beginner")
    approve(client, admin, course_id)
    client.post(f"/api/courses/{course_id}/enroll", headers=student["headers"])

    stats = client.get("/api/admin/stats", headers=admin["headers"]).json()
    assert stats["total_users"] == 2
    assert stats["total_teachers"] == 1
    assert stats["total_courses"] == 1
    assert stats["total_premium_users"] == 1
    assert stats["monthly_revenue"] == 40
    assert stats["weekly_revenue"] == 40
    assert stats["courses_stats"] == [{"level": "beginner", "count": 1, "avg_students": 1.0}]

    for period in ("daily", "weekly", "monthly", "yearly"):
        revenue = client.get(f"/api/admin/revenue?period={period}", headers=admin["headers"]).json()
        assert revenue["period"] == period
        [bucket] = revenue["buckets"]
        assert bucket["total_revenue"] == 40
        assert bucket["transaction_count"] == 1
        assert bucket["course_purchases"] == 1
        assert bucket["premium_subscriptions"] == 0

    bad = client.get("/api/admin/revenue?period=hourly", headers=admin["headers"])
    assert bad.status_code == 400


def test_user_search_and_detail(client, admin, student, other_student):
    page = client.get("/api/admin/users?search=alice", headers=admin["headers"]).json()
    assert page["total_items"] == 1
    assert page["items"][0]["email"] == "alice@example.com"
    assert "password" not in page["items"][0]

    everyone = client.get("/api/admin/users?page=1&limit=2", headers=admin["headers"]).json()
    assert everyone["total_items"] == 3
    assert everyone["total_pages"] == 2
    assert everyone["has_next"] is True

    detail = client.get(f"/api/admin/users/{student['id']}", headers=admin["headers"]).json()
    assert detail["courses_enrolled"] == 0
    assert detail["coins"] == 100


def test_user_update_is_audited(client, admin, student):
    res = client.put(
        f"/api/admin/users/{student['id']}",
        json={"coins": 250, "is_teacher": True},
        headers=admin["headers"],
    )
    assert res.status_code == 200
    assert res.json()["user"]["coins"] == 250
    assert res.json()["user"]["is_teacher"] is True

    logs = client.get("/api/admin/audit-logs?entity_type=user", headers=admin["headers"]).json()
    [entry] = logs["items"]
    assert entry["action"] == "user.update"
    assert entry["entity_id"] == student["id"]
    assert entry["admin"]["id"] == admin["id"]
    assert entry["changes"]["coins"] == {"old": 100, "new": 250}

    # the promoted user can now publish
    create_course(client, student, title="Student made")


def test_inactive_user_is_locked_out(client, admin, student):
    client.put(f"/api/admin/users/{student['id']}", json={"is_active": False}, headers=admin["headers"])
    assert client.get("/api/profile", headers=student["headers"]).status_code == 403


def test_delete_guards(client, admin, student):
    own = client.delete(f"/api/admin/users/{admin['id']}", headers=admin["headers"])
    assert own.status_code == 400

    client.put(f"/api/admin/users/{student['id']}", json={"is_teacher": True}, headers=admin["headers"])
    create_course(client, student, title="Owned")
    teacher = client.delete(f"/api/admin/users/{student['id']}", headers=admin["headers"])
    assert teacher.status_code == 409
    assert teacher.json()["courses"] == 1


def test_delete_user_cascades(client, admin, student, other_student, enrolled):
    client.post("/api/friends", json={"friend_id": other_student["id"]}, headers=student["headers"])
    client.post(f"/api/coins/send/{other_student['id']}", json={"amount": 10}, headers=student["headers"])

    res = client.delete(f"/api/admin/users/{student['id']}", headers=admin["headers"])
    assert res.status_code == 200

    assert client.get(f"/api/admin/users/{student['id']}", headers=admin["headers"]).status_code == 404
    assert client.get("/api/friends", headers=other_student["headers"]).json() == []
    participants = client.get(
        f"/api/admin/courses/{enrolled['id']}/participants", headers=admin["headers"]
    ).json()
    assert participants["total_items"] == 0
    assert balance(client, other_student) == 110


def test_course_admin_view_update_and_filters(client, admin):
    pending_id = create_course(client, admin, title="Pending course")
    approved_id = create_course(client, admin, title="Approved course")
    approve(client, admin, approved_id)

    pending = client.get("/api/admin/courses?status=pending", headers=admin["headers"]).json()
    assert [c["id"] for c in pending["items"]] == [pending_id]

    res = client.put(
        f"/api/admin/courses/{pending_id}",
        json={"title": "Renamed", "price": 75},
        headers=admin["headers"],
    )
    assert res.status_code == 200
    assert res.json()["course"]["title"] == "Renamed"

    full = client.get(f"/api/admin/courses/{approved_id}", headers=admin["headers"]).json()
    assert full["lessons"][0]["content"] == "Hello, how are you?"

    revoke = client.post(
        f"/api/admin/courses/{approved_id}/approve", json={"approved": False}, headers=admin["headers"]
    )
    assert revoke.json()["course"]["is_approved"] is False


def test_admin_sees_quiz_answers(client, admin, course):
    full = client.get(f"/api/admin/courses/{course['id']}", headers=admin["headers"]).json()
    answers = [q["correct_answer"] for q in full["quizzes"][0]["questions"]]
    assert answers == [0, 1, 2, 3, 0]


def test_participants_report_progress(client, admin, student, enrolled):
    client.post(
        f"/api/courses/{enrolled['id']}/lessons/{enrolled['lesson_ids'][0]}/complete",
        headers=student["headers"],
    )
    res = client.get(f"/api/admin/courses/{enrolled['id']}/participants", headers=admin["headers"]).json()
    assert res["course"]["total_lessons"] == 2
    [row] = res["items"]
    assert row["user"]["id"] == student["id"]
    assert row["progress"] == 50
    assert row["completed_lessons"] == 1


def test_delete_course_cascades_and_recomputes_rating(client, admin, student, enrolled):
    for lesson_id in enrolled["lesson_ids"]:
        client.post(f"/api/courses/{enrolled['id']}/lessons/{lesson_id}/complete", headers=student["headers"])
    assert client.get("/api/profile", headers=student["headers"]).json()["rating"] == 100

    res = client.delete(f"/api/admin/courses/{enrolled['id']}", headers=admin["headers"])
    assert res.status_code == 200

    assert client.get(f"/api/courses/{enrolled['id']}").status_code == 404
    assert client.get("/api/progress", headers=student["headers"]).json() == []
    assert client.get("/api/purchases/courses", headers=student["headers"]).json() == []
    assert client.get("/api/profile", headers=student["headers"]).json()["rating"] == 0

    logs = client.get("/api/admin/audit-logs?entity_type=course", headers=admin["headers"]).json()
    assert logs["items"][0]["action"] == "course.delete"
    assert logs["items"][0]["changes"]["title"] == "Everyday English"


def test_payments_listing_by_type(client, admin, student):
    course_id = create_course(client, admin, title="Paid", price=30)
    approve(client, admin, course_id)
    client.post(f"/api/courses/{course_id}/enroll", headers=student["headers"])

    buyer = register_user(client, "carol")
    client.put(f"/api/admin/users/{buyer['id']}", json={"coins": 1300}, headers=admin["headers"])
    client.post("/api/premium/subscribe", headers=buyer["headers"])

    payments = client.get("/api/admin/payments", headers=admin["headers"]).json()
    assert payments["total_items"] == 2

    purchases = client.get("/api/admin/payments?type=course_purchase", headers=admin["headers"]).json()
    assert [p["course"]["title"] for p in purchases["items"]] == ["Paid"]

    premium = client.get("/api/admin/premium-subscriptions", headers=admin["headers"]).json()
    [sub] = premium["items"]
    assert sub["user"]["email"] == "carol@example.com"
    assert sub["amount"] == 1200
    assert sub["course"] is None


def test_missing_html_page_is_404(client):
    assert client.get("/login").status_code == 404
