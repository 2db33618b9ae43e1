from conftest import approve, balance, create_course


def test_free_enrollment_creates_progress_at_first_lesson(client, student, course):
    res = client.post(f"/api/courses/{course['id']}/enroll", headers=student["headers"])
    assert res.status_code == 200
    body = res.json()
    assert body["already_enrolled"] is False
    assert body["progress"]["progress"] == 0
    assert body["progress"]["current_lesson_id"] == course["lesson_ids"][0]
    assert body["coins"] == 100


def test_paid_enrollment_debits_and_records_payment(client, admin, student):
    course_id = create_course(client, admin, title="Paid", price=60)
    approve(client, admin, course_id)

    res = client.post(f"/api/courses/{course_id}/enroll", headers=student["headers"])
    assert res.status_code == 200
    assert res.json()["coins"] == 40

    wallet = client.get("/api/wallet", headers=student["headers"]).json()
    assert wallet["coins"] == 40
    assert [(p["type"], p["amount"], p["course_id"]) for p in wallet["payments"]] == [
        ("course_purchase", 60, course_id)
    ]


def test_second_enrollment_is_terminal_and_free(client, admin, student):
    course_id = create_course(client, admin, title="Paid", price=60)
    approve(client, admin, course_id)

    client.post(f"/api/courses/{course_id}/enroll", headers=student["headers"])
    again = client.post(f"/api/courses/{course_id}/enroll", headers=student["headers"])

    assert again.status_code == 200
    assert again.json()["already_enrolled"] is True
    assert balance(client, student) == 40
    assert len(client.get("/api/wallet", headers=student["headers"]).json()["payments"]) == 1

    detail = client.get(f"/api/courses/{course_id}").json()
    assert detail["students_count"] == 1


def test_insufficient_coins_changes_nothing(client, admin, student):
    course_id = create_course(client, admin, title="Expensive", price=500)
    approve(client, admin, course_id)

    res = client.post(f"/api/courses/{course_id}/enroll", headers=student["headers"])
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "INSUFFICIENT_COINS"
    assert body["required"] == 500
    assert body["current"] == 100

    assert balance(client, student) == 100
    assert client.get(f"/api/courses/{course_id}").json()["students"] == []
    assert client.get("/api/progress", headers=student["headers"]).json() == []


def test_unapproved_course_cannot_be_joined(client, admin, student):
    course_id = create_course(client, admin, title="Draft")
    res = client.post(f"/api/courses/{course_id}/enroll", headers=student["headers"])
    assert res.status_code == 400


def test_enroll_missing_course_is_404(client, student):
    res = client.post(
        "/api/courses/00000000-0000-0000-0000-000000000000/enroll", headers=student["headers"]
    )
    assert res.status_code == 404


def test_course_without_lessons_has_no_current_lesson(client, admin, student):
    course_id = create_course(client, admin, title="Empty", lessons=[])
    approve(client, admin, course_id)
    res = client.post(f"/api/courses/{course_id}/enroll", headers=student["headers"])
    assert res.json()["progress"]["current_lesson_id"] is None


def test_purchases_list_my_courses(client, student, enrolled):
    courses = client.get("/api/purchases/courses", headers=student["headers"]).json()
    assert [c["id"] for c in courses] == [enrolled["id"]]
    assert courses[0]["progress"] == 0
    assert courses[0]["current_lesson_id"] == enrolled["lesson_ids"][0]


def test_re_enrolling_reports_completed_lessons(client, student, enrolled):
    first = enrolled["lesson_ids"][0]
    client.post(f"/api/courses/{enrolled['id']}/lessons/{first}/complete", headers=student["headers"])

    again = client.post(f"/api/courses/{enrolled['id']}/enroll", headers=student["headers"]).json()
    assert again["already_enrolled"] is True
    assert again["progress"]["progress"] == 50
    assert again["progress"]["completed_lessons"] == [first]
