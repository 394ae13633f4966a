"""Users API - Account management for administrators and heads of programs"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, EmailStr, Field

from ..deps import Identity, require_roles
from ...domain.enums import UserRole, UserStatus
from ...domain.models import actor_snapshot
from ...services.user_service import UserService

router = APIRouter()

manage_users = require_roles(UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS)


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str = Field(..., min_length=1)
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    phone_number: Optional[str] = None


class UpdateUserRequest(BaseModel):
    full_name: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    phone_number: Optional[str] = None


@router.get("")
async def list_users(
    role: Optional[UserRole] = Query(None),
    status: Optional[UserStatus] = Query(None),
    search: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    identity: Identity = Depends(manage_users)
):
    """List users with optional role, status and text filters"""
    users, total = UserService().list_users(role, status, search, skip, limit)
    return {
        "items": [u.model_dump(mode="json") for u in users],
        "total": total,
        "skip": skip,
        "limit": limit,
    }


@router.post("", status_code=201)
async def create_user(body: CreateUserRequest, identity: Identity = Depends(manage_users)):
    user = UserService().create_user(
        actor_snapshot(identity),
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        role=body.role,
        status=body.status,
        phone_number=body.phone_number
    )
    return user.model_dump(mode="json")


@router.get("/{user_id}")
async def get_user(user_id: str, identity: Identity = Depends(manage_users)):
    return UserService().get_user(user_id).model_dump(mode="json")


@router.patch("/{user_id}")
async def update_user(user_id: str, body: UpdateUserRequest, identity: Identity = Depends(manage_users)):
    user = UserService().update_user(
        actor_snapshot(identity), user_id, body.model_dump(exclude_none=True)
    )
    return user.model_dump(mode="json")


@router.delete("/{user_id}")
async def delete_user(user_id: str, identity: Identity = Depends(manage_users)):
    UserService().delete_user(actor_snapshot(identity), user_id)
    return {"message": "User deleted"}
