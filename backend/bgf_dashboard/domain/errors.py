"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error - all errors extend this"""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to API response dict"""
        return {
            "message": self.message,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# Authentication & Authorization Errors
class AuthenticationError(DomainError):
    """Credentials or token missing, invalid, or expired"""
    error_code = "AUTHENTICATION_ERROR"
    http_status = 401


class AccessCodeInvalidError(AuthenticationError):
    """Staff access code not found"""
    error_code = "ACCESS_CODE_INVALID"


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair rejected"""
    error_code = "INVALID_CREDENTIALS"


class StaffTokenMissingError(AuthenticationError):
    """No staff token in cookie or header"""
    error_code = "TOKEN_MISSING"


class TokenMalformedError(AuthenticationError):
    """Token structure, signature or claims are invalid"""
    error_code = "TOKEN_INVALID"


class TokenExpiredError(AuthenticationError):
    """Token lifetime has elapsed"""
    error_code = "TOKEN_EXPIRED"


class NotStaffTokenError(AuthenticationError):
    """A valid token that does not carry the staff flag"""
    error_code = "NOT_STAFF_TOKEN"


class AuthorizationError(DomainError):
    """User lacks permission for action"""
    error_code = "AUTHORIZATION_ERROR"
    http_status = 403


class PermissionDeniedError(AuthorizationError):
    """Specific permission denied"""
    error_code = "PERMISSION_DENIED"


class AccountInactiveError(AuthorizationError):
    """Account has been deactivated"""
    error_code = "ACCOUNT_INACTIVE"


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class StageGraphError(ValidationError):
    """Stage graph configuration is not well formed"""
    error_code = "STAGE_GRAPH_INVALID"


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found"""
    error_code = "NOT_FOUND"
    http_status = 404


class UserNotFoundError(NotFoundError):
    """User not found"""
    error_code = "USER_NOT_FOUND"


class RequestNotFoundError(NotFoundError):
    """Request not found"""
    error_code = "REQUEST_NOT_FOUND"


class WorkflowNotFoundError(NotFoundError):
    """Workflow record not found for request"""
    error_code = "WORKFLOW_NOT_FOUND"


class NotificationNotFoundError(NotFoundError):
    """Notification not found"""
    error_code = "NOTIFICATION_NOT_FOUND"


class SettingNotFoundError(NotFoundError):
    """System setting not found"""
    error_code = "SETTING_NOT_FOUND"


# Conflict Errors
class ConflictError(DomainError):
    """Resource conflict"""
    error_code = "CONFLICT"
    http_status = 409


class InvalidStateError(ConflictError):
    """Action not valid for current state"""
    error_code = "INVALID_STATE"


class InvalidTransitionError(InvalidStateError):
    """Target stage is not reachable from the current stage"""
    error_code = "INVALID_TRANSITION"


class AlreadyExistsError(ConflictError):
    """Resource already exists"""
    error_code = "ALREADY_EXISTS"


# Store Errors
class StoreUnavailableError(DomainError):
    """Backing store call failed"""
    error_code = "STORE_UNAVAILABLE"
    http_status = 503
