"""Dashboard API - Role-aware landing page data"""
from fastapi import APIRouter, Depends

from ..deps import Identity, get_current_user_dep
from ...services.dashboard_service import DashboardService

router = APIRouter()


@router.get("")
async def get_dashboard(identity: Identity = Depends(get_current_user_dep)):
    return DashboardService().get_dashboard(identity)
