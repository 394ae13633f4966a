from datetime import datetime, timezone

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from bgf_dashboard.domain.enums import UserRole
from bgf_dashboard.domain.errors import AlreadyExistsError, NotFoundError
from bgf_dashboard.domain.models import StaffAccessCode
from bgf_dashboard.repositories.staff_access_repo import StaffAccessCodeRepository
from bgf_dashboard.services.staff_access_service import (
    DEFAULT_STAFF_ACCESS_CODES, StaffAccessCodeService
)
from bgf_dashboard.utils.time import FrozenClock


class FakeCodeRepo:
    """Counts store reads; optionally fails every read"""

    def __init__(self, codes=None, error=None):
        self.codes = list(codes or [])
        self.error = error
        self.calls = 0

    def list_codes(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.codes)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


def _code(code="NEW123", role=UserRole.DIRECTOR):
    return StaffAccessCode(code=code, name="Stored", role=role)


def test_stored_codes_are_cached_for_ttl(clock):
    repo = FakeCodeRepo([_code()])
    service = StaffAccessCodeService(repo=repo, clock=clock, ttl_seconds=300)

    assert service.validate_code("NEW123").role == UserRole.DIRECTOR
    clock.advance(seconds=299)
    assert service.validate_code("NEW123") is not None
    assert repo.calls == 1

    clock.advance(seconds=1)
    service.validate_code("NEW123")
    assert repo.calls == 2


def test_stored_codes_replace_fallback(clock):
    service = StaffAccessCodeService(repo=FakeCodeRepo([_code()]), clock=clock)
    assert service.validate_code("HOP001") is None


def test_empty_store_uses_fallback_without_caching(clock):
    repo = FakeCodeRepo([])
    service = StaffAccessCodeService(repo=repo, clock=clock)

    assert service.validate_code("HOP001").role == UserRole.HEAD_OF_PROGRAMS
    assert service.validate_code("ADM001").role == UserRole.ADMIN
    assert repo.calls == 2


def test_store_failure_uses_fallback(clock):
    repo = FakeCodeRepo(error=ServerSelectionTimeoutError("no servers"))
    service = StaffAccessCodeService(repo=repo, clock=clock)

    assert service.validate_code("DIR001").role == UserRole.DIRECTOR
    assert len(service.list_codes()) == len(DEFAULT_STAFF_ACCESS_CODES)
    assert repo.calls == 2


def test_lookup_is_exact_and_case_sensitive(clock):
    service = StaffAccessCodeService(repo=FakeCodeRepo([]), clock=clock)
    assert service.validate_code("hop001") is None
    assert service.validate_code(" HOP001") is None
    assert service.validate_code("") is None


def test_create_and_delete_invalidate_cache(clock):
    service = StaffAccessCodeService(repo=StaffAccessCodeRepository(), clock=clock)
    assert service.validate_code("HOP001") is not None

    service.create_code(_code("PM0042", UserRole.PROJECT_MANAGER))
    assert service.validate_code("PM0042").role == UserRole.PROJECT_MANAGER
    assert service.validate_code("HOP001") is None

    with pytest.raises(AlreadyExistsError):
        service.create_code(_code("PM0042"))

    service.delete_code("PM0042")
    assert service.validate_code("HOP001") is not None

    with pytest.raises(NotFoundError):
        service.delete_code("PM0042")
