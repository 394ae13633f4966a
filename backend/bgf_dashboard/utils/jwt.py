"""JWT Tokens - Staff access tokens and regular user session tokens"""
import jwt
from datetime import timedelta
from typing import Any, Dict, Optional

from ..config.settings import settings
from ..domain.enums import UserRole
from ..domain.errors import (
    StaffTokenMissingError, TokenMalformedError, TokenExpiredError, NotStaffTokenError
)
from ..domain.models import StaffIdentity, User
from .logger import get_logger
from .time import Clock, utc_now

logger = get_logger(__name__)

SESSION_TOKEN_TYPE = "session"


class TokenService:
    """
    Sign and verify HS256 tokens

    Expiry is checked against the injected clock rather than the wall clock,
    so lifetimes can be tested without waiting.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        staff_expiry_seconds: Optional[int] = None,
        session_expiry_seconds: Optional[int] = None,
        clock: Clock = utc_now,
    ):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.staff_expiry = timedelta(
            seconds=staff_expiry_seconds or settings.staff_token_expiry_seconds
        )
        self.session_expiry = timedelta(
            seconds=session_expiry_seconds or settings.session_token_expiry_seconds
        )
        self.clock = clock

    # =========================================================================
    # Encoding / decoding
    # =========================================================================

    def _encode(self, claims: Dict[str, Any], lifetime: timedelta) -> str:
        issued_at = self.clock()
        payload = dict(claims)
        payload["iat"] = int(issued_at.timestamp())
        payload["exp"] = int((issued_at + lifetime).timestamp())
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry, returning the claims

        Raises:
            StaffTokenMissingError: token is empty
            TokenMalformedError: structure or signature is invalid
            TokenExpiredError: exp is not after the current clock reading
        """
        if not token:
            raise StaffTokenMissingError("No token provided")

        if token.startswith("Bearer "):
            token = token[7:]

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as e:
            logger.warning(f"Token rejected: {e}")
            raise TokenMalformedError("Invalid token")

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            raise TokenMalformedError("Invalid token")
        if self.clock().timestamp() >= exp:
            raise TokenExpiredError("Token expired")

        return claims

    # =========================================================================
    # Staff tokens
    # =========================================================================

    def issue_staff_token(self, identity: StaffIdentity) -> str:
        """Mint a staff token carrying the identity as claims"""
        return self._encode(
            {
                "id": identity.id,
                "name": identity.name,
                "role": identity.role.value,
                "staff_number": identity.staff_number,
                "is_staff": True,
            },
            self.staff_expiry,
        )

    def verify_staff_token(self, token: str) -> StaffIdentity:
        """Rebuild the staff identity carried by a token"""
        claims = self.decode(token)

        if claims.get("is_staff") is not True:
            raise NotStaffTokenError("Not a valid staff token")

        return self.staff_identity_from_claims(claims)

    @staticmethod
    def staff_identity_from_claims(claims: Dict[str, Any]) -> StaffIdentity:
        try:
            role = UserRole(claims.get("role"))
        except ValueError:
            raise TokenMalformedError("Invalid token", details={"reason": "unknown role"})

        staff_number = claims.get("staff_number")
        name = claims.get("name")
        if not staff_number or not name:
            raise TokenMalformedError("Invalid token", details={"reason": "missing claims"})

        return StaffIdentity(
            id=claims.get("id") or f"staff_{staff_number}",
            name=name,
            role=role,
            staff_number=staff_number,
        )

    # =========================================================================
    # Session tokens
    # =========================================================================

    def issue_session_token(self, user: User) -> str:
        """Mint a session token for a regular user account"""
        return self._encode(
            {
                "sub": user.user_id,
                "email": user.email,
                "role": user.role.value,
                "type": SESSION_TOKEN_TYPE,
            },
            self.session_expiry,
        )

    def verify_session_token(self, token: str) -> Dict[str, Any]:
        """Return session claims, rejecting tokens of any other type"""
        claims = self.decode(token)
        if claims.get("type") != SESSION_TOKEN_TYPE or not claims.get("sub"):
            raise TokenMalformedError("Invalid token")
        return claims


# Global token service instance
_token_service: Optional[TokenService] = None


def get_token_service() -> TokenService:
    """Get global token service instance"""
    global _token_service
    if _token_service is None:
        _token_service = TokenService()
    return _token_service


def set_token_service(service: Optional[TokenService]) -> None:
    """Replace the global token service (None resets to defaults)"""
    global _token_service
    _token_service = service
