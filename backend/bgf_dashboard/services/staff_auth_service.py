"""Staff Auth Service - Access-code login and staff token verification"""
from typing import Optional, Tuple

from ..domain.enums import ActivityAction
from ..domain.errors import AccessCodeInvalidError, ValidationError
from ..domain.models import StaffIdentity, actor_snapshot
from ..utils.jwt import TokenService, get_token_service
from ..utils.logger import get_logger
from .activity_log_service import ActivityLogService
from .staff_access_service import StaffAccessCodeService, get_staff_access_service

logger = get_logger(__name__)


class StaffAuthService:
    """Issue and verify staff tokens"""

    def __init__(
        self,
        access_codes: Optional[StaffAccessCodeService] = None,
        tokens: Optional[TokenService] = None,
        activity: Optional[ActivityLogService] = None
    ):
        self.access_codes = access_codes or get_staff_access_service()
        self.tokens = tokens or get_token_service()
        self.activity = activity or ActivityLogService()

    def issue_staff_token(self, full_name: str, access_code: str) -> Tuple[str, StaffIdentity]:
        """
        Log a staff member in with their access code

        The name shown in the dashboard is the one typed at login; the role
        comes from the access code.

        Raises:
            ValidationError: name or code missing
            AccessCodeInvalidError: code not known
        """
        full_name = (full_name or "").strip()
        if not full_name or not access_code:
            raise ValidationError("Full name and access code are required")

        details = self.access_codes.validate_code(access_code)
        if details is None:
            logger.warning("Staff login with unknown access code")
            raise AccessCodeInvalidError("Invalid access code")

        identity = StaffIdentity(
            id=f"staff_{access_code}",
            name=full_name,
            role=details.role,
            staff_number=access_code
        )
        token = self.tokens.issue_staff_token(identity)

        logger.info(
            f"Staff login: {identity.name}",
            extra={"user_id": identity.id, "role": identity.role.value, "action": "staff_login"}
        )
        self.activity.record(
            actor_snapshot(identity),
            ActivityAction.STAFF_LOGIN,
            entity_type="staff",
            entity_id=identity.id
        )
        return token, identity

    def verify_staff_token(self, token: Optional[str]) -> StaffIdentity:
        """Rebuild the staff identity from a token (see TokenService.verify_staff_token)"""
        return self.tokens.verify_staff_token(token or "")
