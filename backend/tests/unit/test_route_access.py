import pytest

from bgf_dashboard.domain.enums import UserRole
from bgf_dashboard.domain.models import RegularUserIdentity, StaffIdentity
from bgf_dashboard.domain.route_access import PUBLIC_ROUTES, ROUTE_ACCESS, has_route_access, match_route
from bgf_dashboard.engine.route_guard import RouteGuard, normalize_path

ALL = set(UserRole)
STAFF = ALL - {UserRole.USER}
USER_MANAGERS = {UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS}
REPORTS = {UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS, UserRole.DIRECTOR, UserRole.CEO, UserRole.PATRON}
ADMIN_AREA = {UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS, UserRole.DIRECTOR}
LOG_VIEWERS = {UserRole.ADMIN, UserRole.DIRECTOR}
ADMIN = {UserRole.ADMIN}

GOLDEN = {
    "/dashboard": ALL,
    "/requests": ALL,
    "/requests/new": ALL,
    "/requests/REQ-123": ALL,
    "/notifications": ALL,
    "/notifications/preferences": ALL,
    "/profile": ALL,
    "/approvals": STAFF,
    "/approvals/REQ-123": STAFF,
    "/users": USER_MANAGERS,
    "/users/new": USER_MANAGERS,
    "/users/USR-1": USER_MANAGERS,
    "/reports": REPORTS,
    "/admin": ADMIN_AREA,
    "/admin/users": USER_MANAGERS,
    "/admin/users/new": USER_MANAGERS,
    "/admin/users/USR-1": USER_MANAGERS,
    "/admin/activity-logs": LOG_VIEWERS,
    "/admin/settings": ADMIN,
    "/settings": ADMIN,
}


@pytest.mark.parametrize("path,allowed", sorted(GOLDEN.items(), key=lambda kv: kv[0]))
def test_golden_route_table(path, allowed):
    for role in UserRole:
        assert has_route_access(path, role) is (role in allowed), (path, role)


def test_every_table_entry_is_covered():
    covered = {match_route(path)[0] for path in GOLDEN}
    assert covered == {route for route, _ in ROUTE_ACCESS}


def test_role_given_as_string():
    assert has_route_access("/reports", "patron") is True
    assert has_route_access("/reports", "user") is False


def test_missing_or_unknown_role_is_denied():
    assert has_route_access("/dashboard", None) is False
    assert has_route_access("/dashboard", "") is False
    assert has_route_access("/dashboard", "janitor") is False


def test_unknown_path_is_denied():
    assert has_route_access("/secret", UserRole.ADMIN) is False
    assert has_route_access("/requests/1/extra", UserRole.ADMIN) is False


def test_exact_route_wins_over_pattern():
    assert match_route("/users/new")[0] == "/users/new"
    assert match_route("/users/abc")[0] == "/users/:id"


def test_public_routes():
    assert PUBLIC_ROUTES == {
        "/login", "/staff-login", "/login-guide", "/forgot-password", "/reset-password", "/", "/register"
    }


@pytest.fixture
def guard():
    return RouteGuard()


def _staff(role):
    return StaffIdentity(id="staff_X", name="Jane", role=role, staff_number="X")


def test_guard_allows_public_without_identity(guard):
    decision = guard.evaluate("/login")
    assert decision.allowed is True
    assert decision.reason == "public"


def test_guard_redirects_anonymous_to_login(guard):
    decision = guard.evaluate("/dashboard")
    assert decision.allowed is False
    assert decision.redirect_to == "/login"


def test_guard_redirects_forbidden_to_dashboard(guard):
    beneficiary = RegularUserIdentity(
        id="USR-1", email="ben@example.com", full_name="Ben", role=UserRole.USER
    )
    decision = guard.evaluate("/approvals", beneficiary)
    assert decision.allowed is False
    assert decision.redirect_to == "/dashboard"
    assert decision.reason == "forbidden"


def test_guard_allows_authorized_role(guard):
    decision = guard.evaluate("/admin/activity-logs/", _staff(UserRole.DIRECTOR))
    assert decision.allowed is True
    assert decision.redirect_to is None


def test_normalize_path():
    assert normalize_path("/requests/?page=2") == "/requests"
    assert normalize_path("/") == "/"
    assert normalize_path("/reports#top") == "/reports"
