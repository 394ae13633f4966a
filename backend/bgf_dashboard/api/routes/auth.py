"""Auth API - Regular account registration, login and profile"""
from typing import Optional, Union
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from ..deps import get_current_user_dep
from ...config.settings import settings
from ...domain.errors import PermissionDeniedError
from ...domain.models import RegularUserIdentity, StaffIdentity
from ...services.auth_service import AuthService

router = APIRouter()


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)
    phone_number: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


@router.post("/register", status_code=201)
async def register(body: RegisterRequest):
    """Create a beneficiary account"""
    user = AuthService().register(body.email, body.password, body.full_name, body.phone_number)
    return {"message": "Registration successful", "user": user.model_dump(mode="json")}


@router.post("/login")
async def login(body: LoginRequest):
    """Exchange email and password for a session token"""
    token, user = AuthService().login(body.email, body.password)
    return {
        "message": "Login successful",
        "token": token,
        "token_type": "bearer",
        "expires_in": settings.session_token_expiry_seconds,
        "user": user.model_dump(mode="json"),
    }


@router.get("/me")
async def get_me(
    identity: Union[RegularUserIdentity, StaffIdentity] = Depends(get_current_user_dep)
):
    """Current identity, staff or regular"""
    return {"identity": identity.model_dump(mode="json")}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    identity: Union[RegularUserIdentity, StaffIdentity] = Depends(get_current_user_dep)
):
    """Change the password of the signed-in account"""
    if not isinstance(identity, RegularUserIdentity):
        raise PermissionDeniedError("Staff access codes have no password to change")
    AuthService().change_password(identity, body.current_password, body.new_password)
    return {"message": "Password changed successfully"}
