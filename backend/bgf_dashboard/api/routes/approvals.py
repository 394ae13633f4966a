"""Approvals API - Requests waiting on the caller's role"""
from fastapi import APIRouter, Depends

from ..deps import Identity, require_staff_dep
from ...services.workflow_service import WorkflowService

router = APIRouter()


@router.get("")
async def list_pending_approvals(identity: Identity = Depends(require_staff_dep)):
    pending = WorkflowService().get_pending_approvals(identity)
    return {
        "items": [
            {
                "request": p["request"].model_dump(mode="json"),
                "workflow": p["workflow"].model_dump(mode="json"),
                "stage": p["stage"].model_dump(mode="json"),
            }
            for p in pending
        ],
        "total": len(pending),
    }
