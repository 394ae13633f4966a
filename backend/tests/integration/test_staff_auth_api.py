import jwt

from bgf_dashboard.config.settings import settings


def _login(client, full_name="Jane", access_code="HOP001"):
    return client.post("/api/staff-auth/login", json={"fullName": full_name, "accessCode": access_code})


def test_login_with_fallback_code(client):
    resp = _login(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Staff login successful"
    assert body["staff"]["name"] == "Jane"
    assert body["staff"]["role"] == "head_of_programs"
    assert body["staff"]["staff_number"] == "HOP001"
    assert body["staff"]["id"] == "staff_HOP001"
    assert body["staff"]["authenticated"] is True

    claims = jwt.decode(body["token"], settings.jwt_secret, algorithms=["HS256"])
    assert claims["is_staff"] is True
    assert claims["exp"] - claims["iat"] == 14400


def test_login_sets_http_only_cookie(client):
    resp = _login(client)
    cookie = resp.headers["set-cookie"]
    assert cookie.startswith(f"{settings.staff_token_cookie}=")
    assert "HttpOnly" in cookie
    assert "Max-Age=14400" in cookie
    assert "Path=/" in cookie
    assert "samesite=strict" in cookie.lower()


def test_login_missing_fields(client):
    resp = client.post("/api/staff-auth/login", json={"fullName": "Jane"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Full name and access code are required"

    resp = client.post("/api/staff-auth/login", json={"fullName": "   ", "accessCode": "HOP001"})
    assert resp.status_code == 400


def test_login_invalid_code_sets_no_cookie(client):
    resp = _login(client, access_code="hop001")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid access code"
    assert "set-cookie" not in resp.headers


def test_verify_with_cookie(client):
    _login(client)
    resp = client.get("/api/staff-auth/verify")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Staff token verified"
    assert resp.json()["staff"]["name"] == "Jane"


def test_verify_with_bearer_header(client):
    token = _login(client).json()["token"]
    client.cookies.clear()
    resp = client.get("/api/staff-auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["staff"]["role"] == "head_of_programs"


def test_cookie_takes_precedence_over_header(client):
    director_token = _login(client, "Dana", "DIR001").json()["token"]
    client.cookies.clear()
    _login(client, "Jane", "HOP001")

    resp = client.get("/api/staff-auth/verify", headers={"Authorization": f"Bearer {director_token}"})
    assert resp.status_code == 200
    assert resp.json()["staff"]["name"] == "Jane"


def test_verify_without_token(client):
    resp = client.get("/api/staff-auth/verify")
    assert resp.status_code == 401
    assert resp.json()["message"] == "No token provided"


def test_verify_garbage_token(client):
    resp = client.get("/api/staff-auth/verify", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


def test_verify_session_token_is_not_staff(client, register_user):
    headers, _ = register_user()
    resp = client.get("/api/staff-auth/verify", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not a valid staff token"


def test_logout_clears_cookie(client):
    _login(client)
    resp = client.post("/api/staff-auth/logout")
    assert resp.status_code == 200
    assert f"{settings.staff_token_cookie}=" in resp.headers["set-cookie"]
    assert client.get("/api/staff-auth/verify").status_code == 401


def test_staff_login_is_logged(client, staff_login):
    admin = staff_login("ADM001", "Ada")
    resp = client.get("/api/admin/activity-logs", params={"action": "staff_login"}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["total"] >= 1
