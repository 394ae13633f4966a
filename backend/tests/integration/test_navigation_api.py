def test_public_page_for_anonymous(client):
    resp = client.get("/api/navigation/check", params={"path": "/staff-login"})
    assert resp.status_code == 200
    assert resp.json() == {"allowed": True, "redirect_to": None, "reason": "public"}


def test_anonymous_is_sent_to_login(client):
    body = client.get("/api/navigation/check", params={"path": "/dashboard"}).json()
    assert body["allowed"] is False
    assert body["redirect_to"] == "/login"


def test_invalid_token_is_treated_as_anonymous(client):
    body = client.get(
        "/api/navigation/check", params={"path": "/dashboard"}, headers={"Authorization": "Bearer nope"}
    ).json()
    assert body["redirect_to"] == "/login"


def test_beneficiary_is_sent_to_dashboard(client, register_user):
    ben, _ = register_user()
    body = client.get("/api/navigation/check", params={"path": "/approvals/REQ-1"}, headers=ben).json()
    assert body == {"allowed": False, "redirect_to": "/dashboard", "reason": "forbidden"}


def test_staff_cookie_is_enough(client):
    client.post("/api/staff-auth/login", json={"fullName": "Dana", "accessCode": "DIR001"})
    body = client.get("/api/navigation/check", params={"path": "/admin/activity-logs"}).json()
    assert body["allowed"] is True
    assert body["reason"] == "authorized"


def test_routes_listing(client, staff_login):
    body = client.get("/api/navigation/routes", headers=staff_login("PAT001", "Pat")).json()
    assert "/login" in body["public"]
    assert "/reports" in body["accessible"]
    assert "/approvals" in body["accessible"]
    assert "/users" not in body["accessible"]


def test_inactive_account_is_sent_to_login(client, db, register_user):
    ben, user = register_user()
    db["users"].update_one({"user_id": user["user_id"]}, {"$set": {"status": "inactive"}})

    resp = client.get("/api/navigation/check", params={"path": "/dashboard"}, headers=ben)
    assert resp.status_code == 200
    assert resp.json() == {"allowed": False, "redirect_to": "/login", "reason": "unauthenticated"}
