"""Repository modules - Data access layer"""
from .mongo_client import get_database, get_collection, set_database
from .user_repo import UserRepository
from .request_repo import RequestRepository
from .workflow_repo import WorkflowRepository
from .notification_repo import NotificationRepository
from .staff_access_repo import StaffAccessCodeRepository
from .activity_log_repo import ActivityLogRepository
from .settings_repo import SystemSettingsRepository

__all__ = [
    "get_database",
    "get_collection",
    "set_database",
    "UserRepository",
    "RequestRepository",
    "WorkflowRepository",
    "NotificationRepository",
    "StaffAccessCodeRepository",
    "ActivityLogRepository",
    "SystemSettingsRepository",
]
