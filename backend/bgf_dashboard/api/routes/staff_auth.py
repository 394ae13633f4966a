"""Staff Auth API - Access-code login, token verification and logout"""
from typing import Optional
from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..deps import staff_token_from_request
from ...config.settings import settings
from ...domain.errors import StaffTokenMissingError
from ...domain.models import StaffIdentity
from ...services.staff_auth_service import StaffAuthService
from ...utils.time import format_iso, utc_now
from ...utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================

class StaffLoginRequest(BaseModel):
    """Login body; fields are checked by the service so missing ones give a 400 with a message"""
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(None, alias="fullName")
    access_code: Optional[str] = Field(None, alias="accessCode")


def _staff_payload(identity: StaffIdentity, authenticated: bool = True) -> dict:
    payload = identity.model_dump(mode="json", exclude={"kind"})
    payload["authenticated"] = authenticated
    payload["timestamp"] = format_iso(utc_now())
    return payload


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/login")
async def staff_login(body: StaffLoginRequest):
    """
    Log in with a staff access code.

    Returns the staff identity and token, and sets the token as an HTTP-only cookie.
    """
    service = StaffAuthService()
    token, identity = service.issue_staff_token(body.full_name or "", body.access_code or "")

    response = JSONResponse(
        status_code=200,
        content={
            "message": "Staff login successful",
            "staff": _staff_payload(identity),
            "token": token,
        }
    )
    response.set_cookie(
        key=settings.staff_token_cookie,
        value=token,
        httponly=True,
        max_age=settings.staff_token_expiry_seconds,
        path="/",
        samesite="strict",
        secure=settings.is_production,
    )
    return response


@router.get("/verify")
async def verify_staff_token(
    request: Request,
    authorization: Optional[str] = Header(None)
):
    """
    Verify the staff token from the cookie or an Authorization: Bearer header.

    The cookie wins when both are present.
    """
    token = staff_token_from_request(request, authorization)
    if not token:
        raise StaffTokenMissingError("No token provided")

    identity = StaffAuthService().verify_staff_token(token)
    return {
        "message": "Staff token verified",
        "staff": identity.model_dump(mode="json", exclude={"kind"}),
    }


@router.post("/logout")
async def staff_logout():
    """Clear the staff token cookie."""
    response = JSONResponse(status_code=200, content={"message": "Staff logout successful"})
    response.delete_cookie(
        key=settings.staff_token_cookie,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )
    return response
