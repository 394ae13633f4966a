"""API Dependencies - Identity resolution and role checks for routes"""
from typing import Callable, Optional, Union
from fastapi import Depends, Header, Request

from ..config.settings import settings
from ..domain.enums import UserRole
from ..domain.errors import (
    AccountInactiveError, AuthenticationError, PermissionDeniedError, TokenMalformedError
)
from ..domain.models import RegularUserIdentity, StaffIdentity, has_staff_role
from ..services.auth_service import AuthService
from ..utils.jwt import SESSION_TOKEN_TYPE, get_token_service
from ..utils.logger import get_logger

logger = get_logger(__name__)

Identity = Union[RegularUserIdentity, StaffIdentity]


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Token from an Authorization header, without the 'Bearer ' prefix"""
    if not authorization:
        return None
    if authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return authorization.strip() or None


def staff_token_from_request(request: Request, authorization: Optional[str]) -> Optional[str]:
    """Staff cookie takes precedence over the Authorization header"""
    return request.cookies.get(settings.staff_token_cookie) or extract_bearer(authorization)


def resolve_identity(request: Request, authorization: Optional[str]) -> Identity:
    """
    Resolve the caller from the staff cookie or a bearer token

    A bearer token may be a staff token or a regular session token; the
    claims tell them apart.

    Raises:
        AuthenticationError: no credentials, or credentials that do not verify
    """
    tokens = get_token_service()

    cookie = request.cookies.get(settings.staff_token_cookie)
    if cookie:
        return tokens.verify_staff_token(cookie)

    bearer = extract_bearer(authorization)
    if not bearer:
        raise AuthenticationError("Authentication required")

    claims = tokens.decode(bearer)
    if claims.get("is_staff") is True:
        return tokens.staff_identity_from_claims(claims)
    if claims.get("type") == SESSION_TOKEN_TYPE and claims.get("sub"):
        return AuthService().identity_from_claims(claims)
    raise TokenMalformedError("Invalid token")


async def get_current_user_dep(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> Identity:
    """
    Dependency to get the current identity

    Raises:
        AuthenticationError: 401 if credentials are missing or invalid
    """
    identity = resolve_identity(request, authorization)
    request.state.identity = identity
    return identity


async def get_optional_user_dep(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> Optional[Identity]:
    """
    Dependency to optionally get the current identity

    Returns None when no credentials are sent, they fail to verify, or the
    account behind them is inactive.
    """
    try:
        return resolve_identity(request, authorization)
    except (AuthenticationError, AccountInactiveError) as e:
        logger.info(f"Treating request as anonymous: {e.message}", extra={"error_code": e.error_code})
        return None


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory admitting only the given roles"""
    allowed = frozenset(roles)

    async def _check(identity: Identity = Depends(get_current_user_dep)) -> Identity:
        if identity.role not in allowed:
            raise PermissionDeniedError(
                "You do not have permission to perform this action",
                details={"required_roles": sorted(r.value for r in allowed)}
            )
        return identity

    return _check


async def require_staff_dep(identity: Identity = Depends(get_current_user_dep)) -> Identity:
    """Dependency admitting any staff role"""
    if not has_staff_role(identity):
        raise PermissionDeniedError("Staff access required")
    return identity
