from conftest import balance


def test_send_coins_moves_exact_amount(client, student, other_student):
    res = client.post(
        f"/api/coins/send/{other_student['id']}", json={"amount": 30}, headers=student["headers"]
    )
    assert res.status_code == 200
    assert res.json()["coins"] == 70
    assert balance(client, student) == 70
    assert balance(client, other_student) == 130

    messages = client.get(f"/api/chat/{other_student['id']}/messages", headers=student["headers"]).json()
    assert [m["coins"] for m in messages] == [30]


def test_send_coins_insufficient_leaves_both_balances(client, student, other_student):
    res = client.post(
        f"/api/coins/send/{other_student['id']}", json={"amount": 101}, headers=student["headers"]
    )
    assert res.status_code == 400
    assert res.json()["error"] == "INSUFFICIENT_COINS"
    assert balance(client, student) == 100
    assert balance(client, other_student) == 100


def test_send_coins_rejects_bad_targets_and_amounts(client, student):
    assert client.post(
        f"/api/coins/send/{student['id']}", json={"amount": 5}, headers=student["headers"]
    ).status_code == 400
    assert client.post(
        "/api/coins/send/00000000-0000-0000-0000-000000000000", json={"amount": 5}, headers=student["headers"]
    ).status_code == 404
    assert client.post(
        f"/api/coins/send/{student['id']}", json={"amount": 0}, headers=student["headers"]
    ).status_code == 400
    assert balance(client, student) == 100


def test_premium_requires_enough_coins(client, student):
    res = client.post("/api/premium/subscribe", headers=student["headers"])
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "INSUFFICIENT_COINS"
    assert body["required"] == 1200
    assert body["current"] == 100


def test_premium_subscription_flow(client, admin, student):
    client.put(f"/api/admin/users/{student['id']}", json={"coins": 1500}, headers=admin["headers"])

    res = client.post("/api/premium/subscribe", headers=student["headers"])
    assert res.status_code == 200
    assert res.json()["coins"] == 300

    wallet = client.get("/api/wallet", headers=student["headers"]).json()
    assert wallet["is_premium"] is True
    assert [(p["type"], p["amount"]) for p in wallet["payments"]] == [("premium_subscription", 1200)]

    again = client.post("/api/premium/subscribe", headers=student["headers"])
    assert again.status_code == 400
    assert again.json()["error"] == "BAD_REQUEST"
    assert balance(client, student) == 300
