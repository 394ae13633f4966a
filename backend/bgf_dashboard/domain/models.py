"""Domain Models - Pydantic schemas for all entities"""
from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field, EmailStr, ConfigDict

from .enums import (
    UserRole, UserStatus, RequestType, RequestStatus,
    HistoryAction, NotificationType, NotificationCategory, OutboxChannel,
    OutboxStatus
)


# ============================================================================
# Identity
# ============================================================================

class RegularUserIdentity(BaseModel):
    """Identity of a beneficiary or staff member holding a user account"""
    model_config = ConfigDict(extra="forbid")

    kind: Literal["regular"] = "regular"
    id: str = Field(..., description="User ID")
    email: EmailStr
    full_name: str
    role: UserRole
    status: UserStatus = UserStatus.ACTIVE

    @property
    def display_name(self) -> str:
        return self.full_name


class StaffIdentity(BaseModel):
    """Transient staff identity rebuilt from a signed token on every request"""
    model_config = ConfigDict(extra="forbid")

    kind: Literal["staff"] = "staff"
    id: str = Field(..., description="Synthetic ID: staff_<access code>")
    name: str
    role: UserRole
    staff_number: str = Field(..., description="The access code used to log in")
    is_staff: Literal[True] = True

    @property
    def display_name(self) -> str:
        return self.name


Identity = Annotated[
    Union[RegularUserIdentity, StaffIdentity],
    Field(discriminator="kind")
]


class ActorSnapshot(BaseModel):
    """Who performed an action, captured at the time of the action"""
    id: str
    name: str
    role: UserRole
    is_staff: bool = False


def actor_snapshot(identity: Union[RegularUserIdentity, StaffIdentity]) -> ActorSnapshot:
    """Build an actor snapshot from either identity variant"""
    if isinstance(identity, StaffIdentity):
        return ActorSnapshot(id=identity.id, name=identity.name, role=identity.role, is_staff=True)
    return ActorSnapshot(id=identity.id, name=identity.full_name, role=identity.role)


def has_staff_role(identity: Union[RegularUserIdentity, StaffIdentity]) -> bool:
    """True for every role except beneficiary, whichever identity variant holds it"""
    return identity.role != UserRole.USER


# ============================================================================
# Users & Staff Access Codes
# ============================================================================

class User(BaseModel):
    """Persisted user account (password hash is kept by the repository)"""
    model_config = ConfigDict(extra="ignore")

    user_id: str
    email: EmailStr
    full_name: str
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    phone_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None

    def to_identity(self) -> RegularUserIdentity:
        return RegularUserIdentity(
            id=self.user_id,
            email=self.email,
            full_name=self.full_name,
            role=self.role,
            status=self.status
        )


class StaffAccessCode(BaseModel):
    """Shared secret mapped to a staff name and role"""
    model_config = ConfigDict(extra="ignore")

    code: str
    name: str
    role: UserRole


# ============================================================================
# Requests & Workflow
# ============================================================================

class RequesterSnapshot(BaseModel):
    """Requester identity stored on the request"""
    id: str
    name: str
    email: Optional[str] = None


class RequestDocument(BaseModel):
    """Metadata of a document attached to a request"""
    model_config = ConfigDict(extra="ignore")

    document_id: str
    request_id: str
    file_name: str
    file_type: str
    file_url: str
    uploaded_by: Optional[str] = None
    created_at: datetime


class Request(BaseModel):
    """Funding or partnership request"""
    model_config = ConfigDict(extra="ignore")

    request_id: str
    ticket_number: str
    title: str
    description: str = ""
    type: RequestType
    status: RequestStatus = RequestStatus.SUBMITTED
    amount: Optional[float] = None
    requester: RequesterSnapshot
    created_at: datetime
    updated_at: datetime


class WorkflowRecord(BaseModel):
    """Current stage and assignment of a request"""
    model_config = ConfigDict(extra="ignore")

    request_id: str
    request_type: str
    current_stage: str
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class HistoryEntry(BaseModel):
    """Append-only record of something that happened to a request"""
    model_config = ConfigDict(extra="ignore")

    history_id: str
    request_id: str
    sequence: int = Field(..., ge=1, description="Position in the request's history")
    action: HistoryAction
    previous_status: Optional[str] = None
    new_status: Optional[str] = None
    actor: ActorSnapshot
    details: Optional[str] = None
    created_at: datetime


# ============================================================================
# Notifications
# ============================================================================

class Notification(BaseModel):
    """In-app notification"""
    model_config = ConfigDict(extra="ignore")

    notification_id: str
    user_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    category: NotificationCategory = NotificationCategory.OTHER
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    is_read: bool = False
    created_at: datetime
    read_at: Optional[datetime] = None


class OutboxEntry(BaseModel):
    """Pending companion delivery of a notification"""
    model_config = ConfigDict(extra="ignore")

    outbox_id: str
    notification_id: str
    channel: OutboxChannel
    recipient: str
    subject: str
    body: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    status: OutboxStatus = OutboxStatus.PENDING
    created_at: datetime


class PushSubscription(BaseModel):
    """Browser push subscription registered by a user"""
    model_config = ConfigDict(extra="ignore")

    subscription_id: str
    user_id: str
    endpoint: str
    keys: Dict[str, str] = Field(default_factory=dict)
    created_at: datetime


# ============================================================================
# Admin
# ============================================================================

class ActivityLog(BaseModel):
    """Audit trail entry for user activity"""
    model_config = ConfigDict(extra="ignore")

    log_id: str
    user_id: str
    user_name: Optional[str] = None
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class SystemSetting(BaseModel):
    """Key/value system setting"""
    model_config = ConfigDict(extra="ignore")

    key: str
    value: Any = None
    category: str = "general"
    description: Optional[str] = None
    is_public: bool = False
    updated_at: datetime
    updated_by: Optional[str] = None
