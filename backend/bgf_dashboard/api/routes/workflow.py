"""Workflow API - Stage graphs, transitions, delegation and history"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..deps import Identity, get_current_user_dep
from ...domain.stage_graphs import STAGE_GRAPHS, StageGraph, get_stage_graph
from ...services.workflow_service import WorkflowService

router = APIRouter()


class UpdateStageBody(BaseModel):
    new_stage: str = Field(..., min_length=1)
    comment: Optional[str] = None


class DelegateBody(BaseModel):
    staff_id: str = Field(..., min_length=1)
    staff_name: Optional[str] = None
    reason: Optional[str] = None


class CommentBody(BaseModel):
    comment: str = Field(..., min_length=1)


def _graph_json(graph: StageGraph) -> dict:
    return {
        "key": graph.key,
        "initial_stage": graph.initial_stage,
        "stages": [node.model_dump(mode="json") for node in graph.stages.values()],
    }


@router.get("/graphs")
async def list_graphs(identity: Identity = Depends(get_current_user_dep)):
    """All configured stage graphs"""
    return {"items": [_graph_json(g) for g in STAGE_GRAPHS.values()]}


@router.get("/graphs/{request_type}")
async def get_graph(request_type: str, identity: Identity = Depends(get_current_user_dep)):
    """Stage graph used for a request type (unknown types get the default graph)"""
    return _graph_json(get_stage_graph(request_type))


@router.get("/{request_id}")
async def get_workflow(request_id: str, identity: Identity = Depends(get_current_user_dep)):
    """Current stage, assignment and the stages reachable next"""
    record, stage, next_nodes = WorkflowService().get_workflow(identity, request_id)
    return {
        "workflow": record.model_dump(mode="json"),
        "stage": stage.model_dump(mode="json") if stage else None,
        "next_stages": [n.model_dump(mode="json") for n in next_nodes],
    }


@router.post("/{request_id}/stage")
async def update_stage(
    request_id: str,
    body: UpdateStageBody,
    identity: Identity = Depends(get_current_user_dep)
):
    """
    Move a request to another stage.

    Returns 409 when the stage is not reachable from the current one.
    """
    record = WorkflowService().update_stage(identity, request_id, body.new_stage, body.comment)
    return {"message": "Stage updated", "workflow": record.model_dump(mode="json")}


@router.post("/{request_id}/delegate")
async def delegate_request(
    request_id: str,
    body: DelegateBody,
    identity: Identity = Depends(get_current_user_dep)
):
    record = WorkflowService().delegate_request(
        identity, request_id, body.staff_id, body.reason, body.staff_name
    )
    return {"message": "Request delegated", "workflow": record.model_dump(mode="json")}


@router.post("/{request_id}/comments", status_code=201)
async def add_comment(
    request_id: str,
    body: CommentBody,
    identity: Identity = Depends(get_current_user_dep)
):
    entry = WorkflowService().add_comment(identity, request_id, body.comment)
    return entry.model_dump(mode="json")


@router.get("/{request_id}/history")
async def get_history(request_id: str, identity: Identity = Depends(get_current_user_dep)):
    """History entries in the order they were written"""
    entries = WorkflowService().get_history(identity, request_id)
    return {"items": [e.model_dump(mode="json") for e in entries]}
