"""Reports API - Aggregate request statistics"""
from fastapi import APIRouter, Depends

from ..deps import Identity, require_roles
from ...domain.enums import UserRole
from ...services.report_service import ReportService
from ...services.user_service import UserService

router = APIRouter()

view_reports = require_roles(
    UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS, UserRole.DIRECTOR, UserRole.CEO, UserRole.PATRON
)


@router.get("/summary")
async def get_summary(identity: Identity = Depends(view_reports)):
    """Totals by status and type, approved amount and monthly submissions"""
    return ReportService().build_report()


@router.get("/users")
async def get_user_breakdown(identity: Identity = Depends(view_reports)):
    """Number of accounts per role"""
    return {"by_role": UserService().count_by_role()}
