"""Service modules - Business logic layer"""
from .staff_access_service import StaffAccessCodeService, get_staff_access_service
from .staff_auth_service import StaffAuthService
from .auth_service import AuthService
from .user_service import UserService
from .request_service import RequestService
from .workflow_service import WorkflowService
from .notification_service import NotificationService
from .report_service import ReportService
from .dashboard_service import DashboardService
from .activity_log_service import ActivityLogService
from .system_settings_service import SystemSettingsService

__all__ = [
    "StaffAccessCodeService",
    "get_staff_access_service",
    "StaffAuthService",
    "AuthService",
    "UserService",
    "RequestService",
    "WorkflowService",
    "NotificationService",
    "ReportService",
    "DashboardService",
    "ActivityLogService",
    "SystemSettingsService",
]
