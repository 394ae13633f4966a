def _create(client, headers, email, role="user", full_name="New Person"):
    return client.post(
        "/api/users",
        json={"email": email, "password": "Password123", "full_name": full_name, "role": role},
        headers=headers,
    )


def test_user_management_roles(client, staff_login, register_user):
    ben, _ = register_user()
    assert client.get("/api/users", headers=ben).status_code == 403
    assert client.get("/api/users", headers=staff_login("DIR001", "Dana")).status_code == 403
    assert client.get("/api/users", headers=staff_login()).status_code == 200
    assert client.get("/api/users", headers=staff_login("ADM001", "Ada")).status_code == 200


def test_create_list_update_delete(client, staff_login):
    admin = staff_login("ADM001", "Ada")

    resp = _create(client, admin, "officer@example.com", role="assistant_project_officer", full_name="Olu")
    assert resp.status_code == 201
    user_id = resp.json()["user_id"]
    _create(client, admin, "ben@example.com")

    by_role = client.get("/api/users", params={"role": "assistant_project_officer"}, headers=admin).json()
    assert [u["email"] for u in by_role["items"]] == ["officer@example.com"]

    by_search = client.get("/api/users", params={"search": "olu"}, headers=admin).json()
    assert by_search["total"] == 1

    resp = client.patch(f"/api/users/{user_id}", json={"role": "project_manager"}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["role"] == "project_manager"

    assert client.get(f"/api/users/{user_id}", headers=admin).json()["role"] == "project_manager"

    assert client.delete(f"/api/users/{user_id}", headers=admin).status_code == 200
    assert client.get(f"/api/users/{user_id}", headers=admin).status_code == 404


def test_duplicate_user(client, staff_login):
    admin = staff_login("ADM001", "Ada")
    assert _create(client, admin, "same@example.com").status_code == 201
    assert _create(client, admin, "SAME@example.com").status_code == 409


def test_update_without_fields(client, staff_login):
    admin = staff_login("ADM001", "Ada")
    user_id = _create(client, admin, "x@example.com").json()["user_id"]
    assert client.patch(f"/api/users/{user_id}", json={}, headers=admin).status_code == 400


def test_cannot_delete_self(client, staff_login, register_user):
    admin = staff_login("ADM001", "Ada")
    _create(client, admin, "boss@example.com", role="admin")
    login = client.post("/api/auth/login", json={"email": "boss@example.com", "password": "Password123"})
    boss = {"Authorization": f"Bearer {login.json()['token']}"}
    boss_id = login.json()["user"]["user_id"]

    assert client.delete(f"/api/users/{boss_id}", headers=boss).status_code == 400
