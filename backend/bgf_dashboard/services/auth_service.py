"""Auth Service - Email/password accounts and session tokens"""
from typing import Any, Dict, Optional, Tuple
from werkzeug.security import check_password_hash, generate_password_hash

from ..domain.enums import ActivityAction, UserRole, UserStatus
from ..domain.errors import (
    AccountInactiveError, AuthenticationError, InvalidCredentialsError, ValidationError
)
from ..domain.models import RegularUserIdentity, User, actor_snapshot
from ..repositories.user_repo import UserRepository
from ..utils.idgen import generate_user_id
from ..utils.jwt import TokenService, get_token_service
from ..utils.time import utc_now
from ..utils.logger import get_logger
from .activity_log_service import ActivityLogService

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def validate_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class AuthService:
    """Registration, login and password changes for regular users"""

    def __init__(
        self,
        repo: Optional[UserRepository] = None,
        tokens: Optional[TokenService] = None,
        activity: Optional[ActivityLogService] = None
    ):
        self.repo = repo or UserRepository()
        self.tokens = tokens or get_token_service()
        self.activity = activity or ActivityLogService()

    def register(self, email: str, password: str, full_name: str, phone_number: Optional[str] = None) -> User:
        """Create an active beneficiary account"""
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError("Full name is required")
        validate_password(password)

        now = utc_now()
        user = User(
            user_id=generate_user_id(),
            email=email,
            full_name=full_name,
            role=UserRole.USER,
            status=UserStatus.ACTIVE,
            phone_number=phone_number,
            created_at=now,
            updated_at=now
        )
        self.repo.create_user(user, hash_password(password))
        self.activity.record(
            actor_snapshot(user.to_identity()), ActivityAction.REGISTER,
            entity_type="user", entity_id=user.user_id
        )
        return user

    def login(self, email: str, password: str) -> Tuple[str, User]:
        """
        Check credentials and mint a session token

        Raises:
            InvalidCredentialsError: unknown email or wrong password
            AccountInactiveError: the account is deactivated
        """
        found = self.repo.get_credentials(email or "")
        if found is None or not check_password_hash(found[1], password or ""):
            logger.warning("Failed login attempt")
            raise InvalidCredentialsError("Invalid email or password")

        user, _ = found
        if user.status != UserStatus.ACTIVE:
            raise AccountInactiveError("Account is inactive")

        self.repo.record_login(user.user_id)
        token = self.tokens.issue_session_token(user)

        logger.info(
            f"User login: {user.email}",
            extra={"user_id": user.user_id, "role": user.role.value, "action": "login"}
        )
        self.activity.record(
            actor_snapshot(user.to_identity()), ActivityAction.LOGIN,
            entity_type="user", entity_id=user.user_id
        )
        return token, user

    def identity_from_claims(self, claims: Dict[str, Any]) -> RegularUserIdentity:
        """Load the account named by session claims; deleted or inactive accounts are refused"""
        user = self.repo.get_user(claims["sub"])
        if user is None:
            raise AuthenticationError("Account no longer exists")
        if user.status != UserStatus.ACTIVE:
            raise AccountInactiveError("Account is inactive")
        return user.to_identity()

    def change_password(self, identity: RegularUserIdentity, current_password: str, new_password: str) -> None:
        password_hash = self.repo.get_password_hash(identity.id)
        if not password_hash or not check_password_hash(password_hash, current_password or ""):
            raise InvalidCredentialsError("Current password is incorrect")
        validate_password(new_password)

        self.repo.set_password_hash(identity.id, hash_password(new_password))
        self.activity.record(
            actor_snapshot(identity), ActivityAction.CHANGE_PASSWORD,
            entity_type="user", entity_id=identity.id
        )
