"""API Routes module"""
from fastapi import APIRouter

from .staff_auth import router as staff_auth_router
from .auth import router as auth_router
from .users import router as users_router
from .requests import router as requests_router
from .workflow import router as workflow_router
from .approvals import router as approvals_router
from .notifications import router as notifications_router
from .reports import router as reports_router
from .dashboard import router as dashboard_router
from .admin import router as admin_router
from .navigation import router as navigation_router

# Main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(staff_auth_router, prefix="/staff-auth", tags=["Staff Auth"])
api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(requests_router, prefix="/requests", tags=["Requests"])
api_router.include_router(workflow_router, prefix="/workflow", tags=["Workflow"])
api_router.include_router(approvals_router, prefix="/approvals", tags=["Approvals"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(reports_router, prefix="/reports", tags=["Reports"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
api_router.include_router(navigation_router, prefix="/navigation", tags=["Navigation"])

__all__ = ["api_router"]
