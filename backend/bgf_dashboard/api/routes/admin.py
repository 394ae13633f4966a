"""Admin API - Activity logs, system settings, staff access codes and overview"""
from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..deps import Identity, get_current_user_dep, require_roles
from ...domain.enums import ActivityAction, UserRole
from ...domain.models import StaffAccessCode, actor_snapshot
from ...repositories.mongo_client import health_check
from ...services.activity_log_service import ActivityLogService
from ...services.notification_service import NotificationService
from ...services.report_service import ReportService
from ...services.staff_access_service import ACCESS_CODE_PREFIXES, get_staff_access_service
from ...services.system_settings_service import SystemSettingsService
from ...services.user_service import UserService
from ...utils.idgen import generate_access_code

router = APIRouter()

admin_area = require_roles(UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS, UserRole.DIRECTOR)
log_viewers = require_roles(UserRole.ADMIN, UserRole.DIRECTOR)
admin_only = require_roles(UserRole.ADMIN)


class SaveSettingBody(BaseModel):
    value: Any = None
    category: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None


class CreateAccessCodeBody(BaseModel):
    name: str = Field(..., min_length=1)
    role: UserRole
    code: Optional[str] = Field(None, min_length=3, max_length=32)


# ============================================================================
# Overview
# ============================================================================

@router.get("/overview")
async def get_overview(identity: Identity = Depends(admin_area)):
    """Store health, account counts and request totals"""
    report = ReportService().build_report()
    return {
        "health": health_check(),
        "users_by_role": UserService().count_by_role(),
        "requests_total": report["total"],
        "requests_by_status": report["by_status"],
    }


# ============================================================================
# Activity Logs
# ============================================================================

@router.get("/activity-logs")
async def list_activity_logs(
    user_id: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    entity_id: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    identity: Identity = Depends(log_viewers)
):
    logs, total = ActivityLogService().list_logs(
        user_id=user_id, action=action, entity_type=entity_type, entity_id=entity_id,
        skip=skip, limit=limit
    )
    return {
        "items": [log.model_dump(mode="json") for log in logs],
        "total": total,
        "skip": skip,
        "limit": limit,
    }


@router.get("/activity-logs/actions")
async def list_activity_actions(identity: Identity = Depends(log_viewers)):
    """Actions present in the log, for filter menus"""
    return {"items": ActivityLogService().list_actions()}


# ============================================================================
# System Settings
# ============================================================================

@router.get("/settings")
async def list_settings(
    category: Optional[str] = Query(None),
    identity: Identity = Depends(get_current_user_dep)
):
    """Settings visible to the caller; only admins see private ones"""
    items = SystemSettingsService().list_settings(
        category=category, public_only=identity.role != UserRole.ADMIN
    )
    return {"items": [s.model_dump(mode="json") for s in items]}


@router.get("/settings/categories")
async def list_setting_categories(identity: Identity = Depends(admin_only)):
    return {"items": SystemSettingsService().list_categories()}


@router.get("/settings/{key}")
async def get_setting(key: str, identity: Identity = Depends(get_current_user_dep)):
    setting = SystemSettingsService().get_setting(key, public_only=identity.role != UserRole.ADMIN)
    return setting.model_dump(mode="json")


@router.put("/settings/{key}")
async def save_setting(key: str, body: SaveSettingBody, identity: Identity = Depends(admin_only)):
    setting = SystemSettingsService().save_setting(
        actor_snapshot(identity), key, body.value,
        category=body.category, description=body.description, is_public=body.is_public
    )
    return setting.model_dump(mode="json")


@router.delete("/settings/{key}")
async def delete_setting(key: str, identity: Identity = Depends(admin_only)):
    SystemSettingsService().delete_setting(actor_snapshot(identity), key)
    return {"message": "Setting deleted"}


# ============================================================================
# Staff Access Codes
# ============================================================================

@router.get("/staff-access-codes")
async def list_access_codes(identity: Identity = Depends(admin_only)):
    """Codes currently accepted at staff login (stored codes or the built-in fallback)"""
    return {"items": [c.model_dump(mode="json") for c in get_staff_access_service().list_codes()]}


@router.post("/staff-access-codes", status_code=201)
async def create_access_code(body: CreateAccessCodeBody, identity: Identity = Depends(admin_only)):
    access_code = StaffAccessCode(
        code=body.code or generate_access_code(ACCESS_CODE_PREFIXES.get(body.role, "STF")),
        name=body.name,
        role=body.role
    )
    created = get_staff_access_service().create_code(access_code)
    ActivityLogService().record(
        actor_snapshot(identity), ActivityAction.CREATE_ACCESS_CODE,
        entity_type="staff_access_code", entity_id=created.code, details={"role": created.role.value}
    )
    return created.model_dump(mode="json")


@router.delete("/staff-access-codes/{code}")
async def delete_access_code(code: str, identity: Identity = Depends(admin_only)):
    get_staff_access_service().delete_code(code)
    ActivityLogService().record(
        actor_snapshot(identity), ActivityAction.DELETE_ACCESS_CODE,
        entity_type="staff_access_code", entity_id=code
    )
    return {"message": "Access code deleted"}


# ============================================================================
# Housekeeping
# ============================================================================

@router.post("/notifications/cleanup")
async def cleanup_notifications(
    days_old: Optional[int] = Query(None, ge=1),
    identity: Identity = Depends(admin_only)
):
    """Delete notifications older than the retention period"""
    deleted = NotificationService().cleanup_old(days_old)
    return {"deleted_count": deleted}
