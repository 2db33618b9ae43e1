import json

from conftest import FIVE_QUESTIONS, approve, create_course


def test_only_teachers_can_create_courses(client, student):
    res = client.post("/api/courses", data={"title": "Mine"}, headers=student["headers"])
    assert res.status_code == 403


def test_new_course_waits_for_approval(client, admin):
    course_id = create_course(client, admin, title="Phrasal Verbs", level="intermediate")

    assert client.get("/api/courses").json() == []
    approve(client, admin, course_id)

    listing = client.get("/api/courses").json()
    assert [c["id"] for c in listing] == [course_id]
    assert listing[0]["lessons_count"] == 2
    assert listing[0]["teacher"]["username"] == "admin"


def test_course_listing_filters(client, admin):
    a = create_course(client, admin, title="Grammar Basics", level="beginner", category="Grammar")
    b = create_course(client, admin, title="Business Talk", level="advanced", category="Business")
    approve(client, admin, a)
    approve(client, admin, b)

    assert [c["id"] for c in client.get("/api/courses?level=advanced").json()] == [b]
    assert [c["id"] for c in client.get("/api/courses?category=Grammar").json()] == [a]
    assert [c["id"] for c in client.get("/api/courses?search=business").json()] == [b]


def test_course_detail_hides_content_and_answers(client, course):
    detail = client.get(f"/api/courses/{course['id']}").json()

    assert [lesson["order"] for lesson in detail["lessons"]] == [0, 1]
    assert "content" not in detail["lessons"][0]
    assert detail["quizzes"][0]["question_count"] == 5
    assert "questions" not in detail["quizzes"][0]
    assert detail["quizzes"][0]["lesson_id"] == course["lesson_ids"][0]
    assert "likes" not in detail and "comments" not in detail


def test_course_detail_missing_is_404(client):
    res = client.get("/api/courses/00000000-0000-0000-0000-000000000000")
    assert res.status_code == 404
    assert res.json()["error"] == "NOT_FOUND"


def test_malformed_lessons_json_is_rejected(client, admin):
    res = client.post(
        "/api/courses",
        data={"title": "Broken", "lessons": "[{not json"},
        headers=admin["headers"],
    )
    assert res.status_code == 400


def test_quiz_answer_must_index_options(client, admin):
    bad_quiz = [{"lesson_index": 0, "questions": [{"question": "?", "options": ["a", "b"], "correct_answer": 5}]}]
    res = client.post(
        "/api/courses",
        data={
            "title": "Bad quiz",
            "lessons": json.dumps([{"title": "Only lesson"}]),
            "quizzes": json.dumps(bad_quiz),
        },
        headers=admin["headers"],
    )
    assert res.status_code == 400


def test_quiz_lesson_index_out_of_range(client, admin):
    res = client.post(
        "/api/courses",
        data={
            "title": "Bad quiz",
            "lessons": json.dumps([{"title": "Only lesson"}]),
            "quizzes": json.dumps([{"lesson_index": 3, "questions": FIVE_QUESTIONS}]),
        },
        headers=admin["headers"],
    )
    assert res.status_code == 400


def test_negative_price_is_rejected(client, admin):
    res = client.post("/api/courses", data={"title": "Free money", "price": "-5"}, headers=admin["headers"])
    assert res.status_code == 400


def test_teacher_sees_own_courses_with_students(client, admin, student, enrolled):
    courses = client.get("/api/teacher/courses", headers=admin["headers"]).json()
    assert len(courses) == 1
    assert courses[0]["is_approved"] is True
    assert [s["id"] for s in courses[0]["students"]] == [student["id"]]


def test_like_toggles(client, student, course):
    url = f"/api/courses/{course['id']}/like"

    first = client.post(url, headers=student["headers"]).json()
    assert first["liked"] is True
    assert [u["id"] for u in first["likes"]] == [student["id"]]

    second = client.post(url, headers=student["headers"]).json()
    assert second["liked"] is False
    assert second["likes"] == []


def test_comments_and_replies(client, student, other_student, course):
    url = f"/api/courses/{course['id']}/comments"

    res = client.post(url, json={"text": "  Great course!  "}, headers=student["headers"])
    assert res.status_code == 201
    comment_id = res.json()["comment_id"]

    reply = client.post(url, json={"text": "Agreed", "reply_to": comment_id}, headers=other_student["headers"])
    assert reply.status_code == 201
    tree = reply.json()["comments"]
    assert len(tree) == 1
    assert tree[0]["text"] == "Great course!"
    assert [r["text"] for r in tree[0]["replies"]] == ["Agreed"]

    # replies are one level deep
    reply_id = tree[0]["replies"][0]["id"]
    nested = client.post(url, json={"text": "deeper", "reply_to": reply_id}, headers=student["headers"])
    assert nested.status_code == 404

    detail = client.get(f"/api/courses/{course['id']}?include=comments,likes").json()
    assert detail["comments"][0]["replies"][0]["user"]["id"] == other_student["id"]
    assert detail["likes"] == []


def test_empty_comment_is_rejected(client, student, course):
    res = client.post(f"/api/courses/{course['id']}/comments", json={"text": "   "}, headers=student["headers"])
    assert res.status_code == 400


def test_comment_like_toggles_on_replies(client, student, other_student, course):
    url = f"/api/courses/{course['id']}/comments"
    comment_id = client.post(url, json={"text": "Hi"}, headers=student["headers"]).json()["comment_id"]
    reply_id = client.post(
        url, json={"text": "Hello", "reply_to": comment_id}, headers=other_student["headers"]
    ).json()["comment_id"]

    liked = client.post(f"{url}/{reply_id}/like", headers=student["headers"]).json()
    assert liked["liked"] is True
    [liker] = liked["comment"]["likes"]
    assert liker["id"] == student["id"]
    assert liker["first_name"] == "Alice"

    unliked = client.post(f"{url}/{reply_id}/like", headers=student["headers"]).json()
    assert unliked["liked"] is False
    assert unliked["comment"]["likes_count"] == 0

    missing = client.post(f"{url}/00000000-0000-0000-0000-000000000000/like", headers=student["headers"])
    assert missing.status_code == 404
