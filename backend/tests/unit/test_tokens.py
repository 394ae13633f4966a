from datetime import datetime, timezone

import jwt
import pytest

from bgf_dashboard.domain.enums import UserRole, UserStatus
from bgf_dashboard.domain.errors import (
    NotStaffTokenError, StaffTokenMissingError, TokenExpiredError, TokenMalformedError
)
from bgf_dashboard.domain.models import StaffIdentity, User
from bgf_dashboard.utils.jwt import TokenService
from bgf_dashboard.utils.time import FrozenClock

SECRET = "unit-test-secret-0123456789abcdef0123"
START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FrozenClock(START)


@pytest.fixture
def tokens(clock):
    return TokenService(secret=SECRET, clock=clock)


@pytest.fixture
def jane():
    return StaffIdentity(id="staff_HOP001", name="Jane", role=UserRole.HEAD_OF_PROGRAMS, staff_number="HOP001")


def test_staff_token_round_trip(tokens, jane):
    identity = tokens.verify_staff_token(tokens.issue_staff_token(jane))
    assert identity == jane


def test_staff_token_claims(tokens, jane):
    claims = jwt.decode(tokens.issue_staff_token(jane), SECRET, algorithms=["HS256"])
    assert claims["is_staff"] is True
    assert claims["staff_number"] == "HOP001"
    assert claims["role"] == "head_of_programs"
    assert claims["exp"] - claims["iat"] == 4 * 60 * 60


def test_staff_token_valid_just_before_four_hours(tokens, clock, jane):
    token = tokens.issue_staff_token(jane)
    clock.advance(hours=3, minutes=59)
    assert tokens.verify_staff_token(token).name == "Jane"


def test_staff_token_expired_after_four_hours(tokens, clock, jane):
    token = tokens.issue_staff_token(jane)
    clock.advance(hours=4, minutes=1)
    with pytest.raises(TokenExpiredError) as exc:
        tokens.verify_staff_token(token)
    assert exc.value.message == "Token expired"


def test_staff_token_expired_at_exact_expiry(tokens, clock, jane):
    token = tokens.issue_staff_token(jane)
    clock.advance(hours=4)
    with pytest.raises(TokenExpiredError):
        tokens.verify_staff_token(token)


def test_missing_token(tokens):
    with pytest.raises(StaffTokenMissingError) as exc:
        tokens.verify_staff_token("")
    assert exc.value.message == "No token provided"


def test_bearer_prefix_is_stripped(tokens, jane):
    token = tokens.issue_staff_token(jane)
    assert tokens.verify_staff_token(f"Bearer {token}").staff_number == "HOP001"


def test_malformed_token(tokens):
    with pytest.raises(TokenMalformedError) as exc:
        tokens.verify_staff_token("not-a-jwt")
    assert exc.value.message == "Invalid token"


def test_wrong_signature(tokens, clock, jane):
    other = TokenService(secret="another-secret-0123456789abcdef0123", clock=clock)
    with pytest.raises(TokenMalformedError):
        tokens.verify_staff_token(other.issue_staff_token(jane))


def test_unknown_role_is_malformed(tokens, clock):
    token = jwt.encode(
        {
            "id": "staff_X", "name": "Jane", "role": "janitor", "staff_number": "X",
            "is_staff": True, "exp": int(clock().timestamp()) + 60,
        },
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(TokenMalformedError):
        tokens.verify_staff_token(token)


def test_session_token_is_not_a_staff_token(tokens, clock):
    user = User(
        user_id="USR-1", email="ben@example.com", full_name="Ben", role=UserRole.USER,
        status=UserStatus.ACTIVE, created_at=clock(), updated_at=clock()
    )
    session = tokens.issue_session_token(user)
    with pytest.raises(NotStaffTokenError) as exc:
        tokens.verify_staff_token(session)
    assert exc.value.message == "Not a valid staff token"
    assert tokens.verify_session_token(session)["sub"] == "USR-1"


def test_staff_token_is_not_a_session_token(tokens, jane):
    with pytest.raises(TokenMalformedError):
        tokens.verify_session_token(tokens.issue_staff_token(jane))
