"""
Pytest Configuration and Fixtures

Every test gets a fresh in-memory mongomock database and fresh token and
access code services. API tests use FastAPI's TestClient.
"""

import os
import tempfile
import uuid

os.environ.setdefault("LOGS_PATH", tempfile.mkdtemp(prefix="bgf-dashboard-logs-"))
os.environ.setdefault("JWT_SECRET", "bgf-dashboard-test-secret-0123456789abcdef")
os.environ.setdefault("ENVIRONMENT", "test")

import mongomock
import pytest
from fastapi.testclient import TestClient

from bgf_dashboard.repositories.mongo_client import set_database
from bgf_dashboard.services.staff_access_service import set_staff_access_service
from bgf_dashboard.utils.jwt import set_token_service

DEFAULT_PASSWORD = "Password123"


@pytest.fixture(autouse=True)
def db():
    """Fresh database per test"""
    database = mongomock.MongoClient()["bgf_dashboard_test"]
    set_database(database)
    set_staff_access_service(None)
    set_token_service(None)
    yield database
    set_database(None)
    set_staff_access_service(None)
    set_token_service(None)


@pytest.fixture
def client(db):
    from bgf_dashboard.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def staff_login(client):
    """
    Log in with an access code and return bearer headers

    The cookie set by the login is cleared so later requests only carry
    the headers they are given.
    """

    def _login(access_code: str = "HOP001", full_name: str = "Jane"):
        resp = client.post(
            "/api/staff-auth/login",
            json={"fullName": full_name, "accessCode": access_code},
        )
        assert resp.status_code == 200, resp.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login


@pytest.fixture
def register_user(client):
    """Register a beneficiary account and return (headers, user json)"""

    def _register(email: str = None, full_name: str = "Test Beneficiary", password: str = DEFAULT_PASSWORD):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        resp = client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "full_name": full_name},
        )
        assert resp.status_code == 201, resp.text

        login = client.post("/api/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        return {"Authorization": f"Bearer {login.json()['token']}"}, login.json()["user"]

    return _register


@pytest.fixture
def create_request(client):
    """Submit a request as the given caller and return its json"""

    def _create(headers, title: str = "School fees support", type: str = "education", amount: float = 1200.0):
        resp = client.post(
            "/api/requests",
            json={"title": title, "type": type, "description": "Term two fees", "amount": amount},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
