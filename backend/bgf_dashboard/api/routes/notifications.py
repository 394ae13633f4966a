"""Notifications API - In-app notification bell and push subscriptions"""
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..deps import Identity, get_current_user_dep, require_roles
from ...domain.enums import NotificationCategory, NotificationType, UserRole
from ...domain.models import Notification
from ...services.notification_service import NotificationService

router = APIRouter()


# =============================================================================
# Request / Response Models
# =============================================================================

class NotificationResponse(BaseModel):
    """Single notification response"""
    notification_id: str
    title: str
    message: str
    type: str
    category: str
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    is_read: bool
    created_at: str
    read_at: Optional[str] = None


class NotificationListResponse(BaseModel):
    """List of notifications with metadata"""
    items: List[NotificationResponse]
    unread_count: int
    total: int


class UnreadCountResponse(BaseModel):
    """Just the unread count"""
    unread_count: int


class MarkReadResponse(BaseModel):
    """Response after marking notifications read"""
    success: bool
    marked_count: int


class CreateNotificationBody(BaseModel):
    user_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.INFO
    category: NotificationCategory = NotificationCategory.SYSTEM_ANNOUNCEMENT
    send_email: bool = False
    email_recipient: Optional[str] = None


class PushSubscriptionBody(BaseModel):
    endpoint: str = Field(..., min_length=1)
    keys: Dict[str, str] = Field(default_factory=dict)


def _to_response(n: Notification) -> NotificationResponse:
    data = n.model_dump(mode="json")
    return NotificationResponse(**{k: data[k] for k in NotificationResponse.model_fields})


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    category: Optional[NotificationCategory] = Query(None),
    identity: Identity = Depends(get_current_user_dep)
):
    """
    Get notifications for the current user.

    - Sorted by newest first
    - Supports filtering by unread only
    - Supports filtering by category
    """
    service = NotificationService()
    items, total = service.list_notifications(
        identity.id, unread_only=unread_only, category=category, skip=skip, limit=limit
    )
    return NotificationListResponse(
        items=[_to_response(n) for n in items],
        unread_count=service.get_unread_count(identity.id),
        total=total
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(identity: Identity = Depends(get_current_user_dep)):
    """
    Get just the unread notification count.

    This is a lightweight endpoint for polling the notification badge.
    """
    return UnreadCountResponse(unread_count=NotificationService().get_unread_count(identity.id))


@router.post("", response_model=NotificationResponse, status_code=201)
async def create_notification(
    body: CreateNotificationBody,
    identity: Identity = Depends(require_roles(UserRole.ADMIN))
):
    """Send an announcement to a user (admin only)"""
    notification = NotificationService().create_notification(
        user_id=body.user_id,
        title=body.title,
        message=body.message,
        type=body.type,
        category=body.category,
        send_email=body.send_email,
        email_recipient=body.email_recipient
    )
    return _to_response(notification)


@router.post("/read-all", response_model=MarkReadResponse)
async def mark_all_read(identity: Identity = Depends(get_current_user_dep)):
    """Mark all notifications as read"""
    count = NotificationService().mark_all_as_read(identity.id)
    return MarkReadResponse(success=True, marked_count=count)


@router.delete("")
async def delete_all_notifications(identity: Identity = Depends(get_current_user_dep)):
    count = NotificationService().delete_all(identity.id)
    return {"success": True, "deleted_count": count}


@router.post("/push-subscriptions", status_code=201)
async def subscribe_push(body: PushSubscriptionBody, identity: Identity = Depends(get_current_user_dep)):
    """Register a browser push subscription"""
    subscription = NotificationService().subscribe_push(identity.id, body.endpoint, body.keys)
    return subscription.model_dump(mode="json")


@router.delete("/push-subscriptions")
async def unsubscribe_push(
    endpoint: str = Query(..., min_length=1),
    identity: Identity = Depends(get_current_user_dep)
):
    removed = NotificationService().unsubscribe_push(identity.id, endpoint)
    return {"success": removed}


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(notification_id: str, identity: Identity = Depends(get_current_user_dep)):
    return _to_response(NotificationService().get_notification(notification_id, identity.id))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(notification_id: str, identity: Identity = Depends(get_current_user_dep)):
    """Mark a single notification as read"""
    return _to_response(NotificationService().mark_as_read(notification_id, identity.id))


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, identity: Identity = Depends(get_current_user_dep)):
    NotificationService().delete_notification(notification_id, identity.id)
    return {"success": True}
