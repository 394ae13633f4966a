"""Staff Access Service - Access code lookup with a TTL cache and fallback map"""
from datetime import timedelta
from typing import Dict, List, Optional
from pymongo.errors import PyMongoError

from ..config.settings import settings
from ..domain.enums import UserRole
from ..domain.errors import StoreUnavailableError
from ..domain.models import StaffAccessCode
from ..repositories.staff_access_repo import StaffAccessCodeRepository
from ..utils.time import Clock, utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


# Used only when the store is unreachable or holds no codes
DEFAULT_STAFF_ACCESS_CODES: Dict[str, StaffAccessCode] = {
    code: StaffAccessCode(code=code, name=name, role=role)
    for code, name, role in (
        ("APO001", "Field Officer", UserRole.ASSISTANT_PROJECT_OFFICER),
        ("RPM001", "Project Manager", UserRole.PROJECT_MANAGER),
        ("HOP001", "Program Manager", UserRole.HEAD_OF_PROGRAMS),
        ("DIR001", "Director", UserRole.DIRECTOR),
        ("CEO001", "Chief Executive", UserRole.CEO),
        ("PAT001", "Patron", UserRole.PATRON),
        ("ADM001", "Administrator", UserRole.ADMIN),
    )
}

# Prefix for generated codes, e.g. HOP482
ACCESS_CODE_PREFIXES: Dict[UserRole, str] = {
    c.role: code[:3] for code, c in DEFAULT_STAFF_ACCESS_CODES.items()
}


class StaffAccessCodeService:
    """
    Resolve staff access codes

    Stored codes are cached for the configured TTL. When the store fails or
    returns nothing, the built-in map is served instead and is not cached, so
    the next call retries the store.
    """

    def __init__(
        self,
        repo: Optional[StaffAccessCodeRepository] = None,
        clock: Clock = utc_now,
        ttl_seconds: Optional[int] = None
    ):
        self._repo = repo
        self.clock = clock
        self.ttl = timedelta(
            seconds=ttl_seconds if ttl_seconds is not None else settings.staff_code_cache_ttl_seconds
        )
        self._cache: Optional[Dict[str, StaffAccessCode]] = None
        self._loaded_at = None

    @property
    def repo(self) -> StaffAccessCodeRepository:
        if self._repo is None:
            self._repo = StaffAccessCodeRepository()
        return self._repo

    def get_codes(self) -> Dict[str, StaffAccessCode]:
        """All known codes keyed by code"""
        now = self.clock()
        if self._cache is not None and now - self._loaded_at < self.ttl:
            return self._cache

        try:
            stored = self.repo.list_codes()
        except (PyMongoError, StoreUnavailableError) as e:
            logger.warning(f"Using fallback staff access codes - store unavailable: {e}")
            return dict(DEFAULT_STAFF_ACCESS_CODES)

        if not stored:
            logger.warning("Using fallback staff access codes - no codes found in the store")
            return dict(DEFAULT_STAFF_ACCESS_CODES)

        self._cache = {item.code: item for item in stored}
        self._loaded_at = now
        return self._cache

    def validate_code(self, access_code: str) -> Optional[StaffAccessCode]:
        """Exact, case-sensitive lookup. None when the code is unknown."""
        if not access_code:
            return None
        return self.get_codes().get(access_code)

    def list_codes(self) -> List[StaffAccessCode]:
        return sorted(self.get_codes().values(), key=lambda c: c.code)

    def invalidate(self) -> None:
        """Drop the cache so the next lookup reads the store"""
        self._cache = None
        self._loaded_at = None

    def create_code(self, access_code: StaffAccessCode) -> StaffAccessCode:
        created = self.repo.create_code(access_code)
        self.invalidate()
        return created

    def delete_code(self, code: str) -> None:
        self.repo.delete_code(code)
        self.invalidate()


# Global service instance
_staff_access_service: Optional[StaffAccessCodeService] = None


def get_staff_access_service() -> StaffAccessCodeService:
    """Get global staff access code service"""
    global _staff_access_service
    if _staff_access_service is None:
        _staff_access_service = StaffAccessCodeService()
    return _staff_access_service


def set_staff_access_service(service: Optional[StaffAccessCodeService]) -> None:
    """Replace the global service (None resets to defaults)"""
    global _staff_access_service
    _staff_access_service = service
