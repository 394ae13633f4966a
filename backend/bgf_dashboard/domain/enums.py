"""Domain Enumerations - Roles, statuses and types"""
from enum import Enum


class UserRole(str, Enum):
    """Roles known to the dashboard"""
    ADMIN = "admin"
    ASSISTANT_PROJECT_OFFICER = "assistant_project_officer"
    PROJECT_MANAGER = "project_manager"
    HEAD_OF_PROGRAMS = "head_of_programs"
    DIRECTOR = "director"
    CEO = "ceo"
    PATRON = "patron"
    USER = "user"  # Beneficiary


STAFF_ROLES = frozenset(role for role in UserRole if role != UserRole.USER)


class UserStatus(str, Enum):
    """Account status for regular users"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class RequestType(str, Enum):
    """Request types based on BGF services"""
    SCHOLARSHIP = "scholarship"
    GRANT = "grant"
    HEALTH_WELLNESS = "health_wellness"
    FOOD_NUTRITION = "food_nutrition"
    WASH = "wash"
    DRR_SOCIAL_PROTECTION = "drr_social_protection"
    EDUCATION = "education"
    SDA_SUPPORT = "sda_support"


REQUEST_TYPE_LABELS = {
    RequestType.SCHOLARSHIP: "Scholarship",
    RequestType.GRANT: "Grant",
    RequestType.HEALTH_WELLNESS: "Health & Wellness",
    RequestType.FOOD_NUTRITION: "Food & Nutrition",
    RequestType.WASH: "Water, Sanitation & Hygiene",
    RequestType.DRR_SOCIAL_PROTECTION: "Disaster Risk Reduction & Social Protection",
    RequestType.EDUCATION: "Education",
    RequestType.SDA_SUPPORT: "SDA Support",
}


class RequestStatus(str, Enum):
    """Request status shown to users"""
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    OFFICER_REVIEWED = "officer_reviewed"
    HOP_REVIEWED = "hop_reviewed"
    DIRECTOR_REVIEWED = "director_reviewed"
    APPROVED = "approved"
    # Side states outside the linear progression
    REJECTED = "rejected"
    PENDING_INFORMATION = "pending_information"
    CANCELLED = "cancelled"


# Linear progression used for progress display
STATUS_PROGRESSION = (
    RequestStatus.SUBMITTED,
    RequestStatus.UNDER_REVIEW,
    RequestStatus.OFFICER_REVIEWED,
    RequestStatus.HOP_REVIEWED,
    RequestStatus.DIRECTOR_REVIEWED,
    RequestStatus.APPROVED,
)


class WorkflowStage(str, Enum):
    """Stage identifiers used by the stage graphs"""
    SUBMITTED = "submitted"
    INITIAL_REVIEW = "initial_review"
    OFFICER_REVIEW = "officer_review"
    FINAL_REVIEW = "final_review"
    FINANCIAL_REVIEW = "financial_review"
    DOCUMENTATION_REVIEW = "documentation_review"
    SITE_VISIT = "site_visit"
    COMMITTEE_REVIEW = "committee_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class HistoryAction(str, Enum):
    """History entry kinds"""
    STATUS_CHANGE = "status_change"
    ASSIGNMENT = "assignment"
    COMMENT = "comment"


class NotificationType(str, Enum):
    """Visual severity of an in-app notification"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationCategory(str, Enum):
    """Categories for organizing notifications"""
    REQUEST_STATUS = "request_status"
    REQUEST_COMMENT = "request_comment"
    REQUEST_ASSIGNMENT = "request_assignment"
    REQUEST_DOCUMENT = "request_document"
    ACCOUNT_ACTIVITY = "account_activity"
    ACCOUNT_SECURITY = "account_security"
    SYSTEM_ANNOUNCEMENT = "system_announcement"
    SYSTEM_MAINTENANCE = "system_maintenance"
    OTHER = "other"


class OutboxChannel(str, Enum):
    """Companion delivery channels"""
    EMAIL = "EMAIL"
    PUSH = "PUSH"


class OutboxStatus(str, Enum):
    """Notification outbox status"""
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class ActivityAction(str, Enum):
    """Actions recorded in the activity log"""
    LOGIN = "login"
    STAFF_LOGIN = "staff_login"
    LOGOUT = "logout"
    REGISTER = "register"
    CREATE_REQUEST = "create_request"
    UPDATE_REQUEST = "update_request"
    DELETE_REQUEST = "delete_request"
    UPLOAD_DOCUMENT = "upload_document"
    STAGE_CHANGE = "stage_change"
    DELEGATE_REQUEST = "delegate_request"
    ADD_COMMENT = "add_comment"
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    CHANGE_PASSWORD = "change_password"
    UPDATE_SETTING = "update_setting"
    DELETE_SETTING = "delete_setting"
    CREATE_ACCESS_CODE = "create_access_code"
    DELETE_ACCESS_CODE = "delete_access_code"
