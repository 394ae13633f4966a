from tests.conftest import DEFAULT_PASSWORD


def test_register_and_login(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "Ben@Example.com", "password": DEFAULT_PASSWORD, "full_name": "Ben"},
    )
    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["role"] == "user"
    assert user["status"] == "active"
    assert "password_hash" not in user

    login = client.post("/api/auth/login", json={"email": "ben@example.com", "password": DEFAULT_PASSWORD})
    assert login.status_code == 200
    assert login.json()["token_type"] == "bearer"
    assert login.json()["user"]["email"] == "ben@example.com"


def test_duplicate_email(client, register_user):
    register_user(email="dup@example.com")
    resp = client.post(
        "/api/auth/register",
        json={"email": "DUP@example.com", "password": DEFAULT_PASSWORD, "full_name": "Again"},
    )
    assert resp.status_code == 409


def test_short_password_rejected(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "short@example.com", "password": "abc", "full_name": "Short"},
    )
    assert resp.status_code == 400


def test_bad_credentials(client, register_user):
    register_user(email="ben@example.com")
    resp = client.post("/api/auth/login", json={"email": "ben@example.com", "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid email or password"

    resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": DEFAULT_PASSWORD})
    assert resp.status_code == 401


def test_me_for_regular_user(client, register_user):
    headers, user = register_user(full_name="Ben")
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200
    identity = resp.json()["identity"]
    assert identity["kind"] == "regular"
    assert identity["id"] == user["user_id"]


def test_me_for_staff(client, staff_login):
    resp = client.get("/api/auth/me", headers=staff_login())
    assert resp.status_code == 200
    assert resp.json()["identity"]["kind"] == "staff"
    assert resp.json()["identity"]["name"] == "Jane"


def test_me_requires_credentials(client):
    assert client.get("/api/auth/me").status_code == 401


def test_change_password(client, register_user):
    headers, user = register_user(email="pw@example.com")
    resp = client.post(
        "/api/auth/change-password",
        json={"current_password": DEFAULT_PASSWORD, "new_password": "NewPassword456"},
        headers=headers,
    )
    assert resp.status_code == 200

    old = client.post("/api/auth/login", json={"email": "pw@example.com", "password": DEFAULT_PASSWORD})
    assert old.status_code == 401
    new = client.post("/api/auth/login", json={"email": "pw@example.com", "password": "NewPassword456"})
    assert new.status_code == 200


def test_change_password_wrong_current(client, register_user):
    headers, _ = register_user()
    resp = client.post(
        "/api/auth/change-password",
        json={"current_password": "not-it", "new_password": "NewPassword456"},
        headers=headers,
    )
    assert resp.status_code == 401


def test_staff_cannot_change_password(client, staff_login):
    resp = client.post(
        "/api/auth/change-password",
        json={"current_password": "x", "new_password": "NewPassword456"},
        headers=staff_login(),
    )
    assert resp.status_code == 403


def test_inactive_account_cannot_log_in(client, staff_login, register_user):
    _, user = register_user(email="gone@example.com")
    admin = staff_login("ADM001", "Ada")
    resp = client.patch(f"/api/users/{user['user_id']}", json={"status": "inactive"}, headers=admin)
    assert resp.status_code == 200

    resp = client.post("/api/auth/login", json={"email": "gone@example.com", "password": DEFAULT_PASSWORD})
    assert resp.status_code == 403
