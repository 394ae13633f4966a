def test_activity_logs_visibility(client, staff_login):
    assert client.get("/api/admin/activity-logs", headers=staff_login()).status_code == 403
    assert client.get("/api/admin/activity-logs", headers=staff_login("DIR001", "Dana")).status_code == 200


def test_activity_logs_filters(client, staff_login, register_user, create_request):
    ben, user = register_user()
    request = create_request(ben)
    admin = staff_login("ADM001", "Ada")

    by_user = client.get("/api/admin/activity-logs", params={"user_id": user["user_id"]}, headers=admin).json()
    actions = {log["action"] for log in by_user["items"]}
    assert {"register", "login", "create_request"} <= actions

    by_entity = client.get(
        "/api/admin/activity-logs",
        params={"entity_type": "request", "entity_id": request["request_id"]},
        headers=admin,
    ).json()
    assert [log["action"] for log in by_entity["items"]] == ["create_request"]

    known = client.get("/api/admin/activity-logs/actions", headers=admin).json()["items"]
    assert "create_request" in known
    assert known == sorted(known)


def test_settings_crud(client, staff_login, register_user):
    admin = staff_login("ADM001", "Ada")
    ben, _ = register_user()

    resp = client.put(
        "/api/admin/settings/support_email",
        json={"value": "help@example.com", "category": "contact", "is_public": True},
        headers=admin,
    )
    assert resp.status_code == 200
    client.put("/api/admin/settings/smtp_password", json={"value": "hunter2", "category": "email"}, headers=admin)

    public = client.get("/api/admin/settings", headers=ben).json()["items"]
    assert [s["key"] for s in public] == ["support_email"]
    assert client.get("/api/admin/settings/smtp_password", headers=ben).status_code == 404

    everything = client.get("/api/admin/settings", headers=admin).json()["items"]
    assert {s["key"] for s in everything} == {"support_email", "smtp_password"}

    categories = client.get("/api/admin/settings/categories", headers=admin).json()["items"]
    assert categories == ["contact", "email"]

    # omitted attributes keep their stored values
    resp = client.put("/api/admin/settings/support_email", json={"value": "ops@example.com"}, headers=admin)
    assert resp.json()["category"] == "contact"
    assert resp.json()["is_public"] is True

    assert client.delete("/api/admin/settings/smtp_password", headers=admin).status_code == 200
    assert client.delete("/api/admin/settings/smtp_password", headers=admin).status_code == 404


def test_settings_writes_are_admin_only(client, staff_login):
    resp = client.put("/api/admin/settings/x", json={"value": 1}, headers=staff_login("DIR001", "Dana"))
    assert resp.status_code == 403


def test_staff_access_codes(client, staff_login):
    admin = staff_login("ADM001", "Ada")

    codes = client.get("/api/admin/staff-access-codes", headers=admin).json()["items"]
    assert "HOP001" in [c["code"] for c in codes]

    resp = client.post(
        "/api/admin/staff-access-codes",
        json={"code": "PM7777", "name": "Regional PM", "role": "project_manager"},
        headers=admin,
    )
    assert resp.status_code == 201

    login = client.post("/api/staff-auth/login", json={"fullName": "Pat", "accessCode": "PM7777"})
    assert login.status_code == 200
    assert login.json()["staff"]["role"] == "project_manager"
    client.cookies.clear()

    # stored codes now replace the built-in ones
    fallback = client.post("/api/staff-auth/login", json={"fullName": "Jane", "accessCode": "HOP001"})
    assert fallback.status_code == 401

    duplicate = client.post(
        "/api/admin/staff-access-codes",
        json={"code": "PM7777", "name": "Again", "role": "project_manager"},
        headers=admin,
    )
    assert duplicate.status_code == 409

    assert client.delete("/api/admin/staff-access-codes/PM7777", headers=admin).status_code == 200
    again = client.post("/api/staff-auth/login", json={"fullName": "Jane", "accessCode": "HOP001"})
    assert again.status_code == 200


def test_generated_access_code(client, staff_login):
    admin = staff_login("ADM001", "Ada")
    resp = client.post(
        "/api/admin/staff-access-codes",
        json={"name": "Field Officer", "role": "assistant_project_officer"},
        headers=admin,
    )
    assert resp.status_code == 201
    assert resp.json()["code"].startswith("APO")
    assert len(resp.json()["code"]) == 6


def test_access_codes_admin_only(client, staff_login):
    assert client.get("/api/admin/staff-access-codes", headers=staff_login()).status_code == 403


def test_overview(client, staff_login, register_user, create_request):
    ben, _ = register_user()
    create_request(ben)
    resp = client.get("/api/admin/overview", headers=staff_login())
    assert resp.status_code == 200
    body = resp.json()
    assert body["requests_total"] == 1
    assert body["users_by_role"] == {"user": 1}


def test_notification_cleanup(client, db, staff_login, register_user):
    _, user = register_user()
    admin = staff_login("ADM001", "Ada")
    client.post(
        "/api/notifications",
        json={"user_id": user["user_id"], "title": "Fresh", "message": "Keep me"},
        headers=admin,
    )
    db["notifications"].insert_one({
        "notification_id": "NTF-old", "user_id": user["user_id"], "title": "Old", "message": "Drop me",
        "type": "info", "category": "other", "is_read": True, "created_at": "2020-01-01T00:00:00Z",
    })

    resp = client.post("/api/admin/notifications/cleanup", params={"days_old": 30}, headers=admin)
    assert resp.json() == {"deleted_count": 1}
    assert db["notifications"].count_documents({"user_id": user["user_id"]}) == 1
