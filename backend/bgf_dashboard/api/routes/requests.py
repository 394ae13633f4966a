"""Requests API - Create, browse and edit funding requests"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..deps import Identity, get_current_user_dep
from ...domain.enums import RequestStatus, RequestType
from ...services.request_service import RequestService
from ...services.report_service import status_progress

router = APIRouter()


class CreateRequestBody(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: RequestType
    description: str = ""
    amount: Optional[float] = Field(None, ge=0)


class UpdateRequestBody(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0)


class AddDocumentBody(BaseModel):
    file_name: str = Field(..., min_length=1)
    file_type: str = "application/octet-stream"
    file_url: str = Field(..., min_length=1)


def _request_json(request) -> dict:
    data = request.model_dump(mode="json")
    data["progress"] = status_progress(request.status)
    return data


@router.post("", status_code=201)
async def create_request(body: CreateRequestBody, identity: Identity = Depends(get_current_user_dep)):
    """Submit a new request; its workflow starts at the first stage"""
    request = RequestService().create_request(
        identity,
        title=body.title,
        request_type=body.type,
        description=body.description,
        amount=body.amount
    )
    return _request_json(request)


@router.get("")
async def list_requests(
    status: Optional[RequestStatus] = Query(None),
    type: Optional[RequestType] = Query(None),
    search: Optional[str] = Query(None),
    mine: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    identity: Identity = Depends(get_current_user_dep)
):
    """
    List requests, newest first.

    Beneficiaries only see their own; staff see all unless mine=true.
    """
    requests, total = RequestService().list_requests(
        identity, status=status, request_type=type, search=search, mine=mine, skip=skip, limit=limit
    )
    return {
        "items": [_request_json(r) for r in requests],
        "total": total,
        "skip": skip,
        "limit": limit,
    }


@router.get("/{request_id}")
async def get_request(request_id: str, identity: Identity = Depends(get_current_user_dep)):
    """Request with documents, workflow, history and the stages it can move to"""
    detail = RequestService().get_request_detail(identity, request_id)
    return {
        "request": _request_json(detail["request"]),
        "documents": [d.model_dump(mode="json") for d in detail["documents"]],
        "workflow": detail["workflow"].model_dump(mode="json") if detail["workflow"] else None,
        "history": [h.model_dump(mode="json") for h in detail["history"]],
        "next_stages": detail["next_stages"],
    }


@router.patch("/{request_id}")
async def update_request(
    request_id: str,
    body: UpdateRequestBody,
    identity: Identity = Depends(get_current_user_dep)
):
    request = RequestService().update_request(identity, request_id, body.model_dump(exclude_none=True))
    return _request_json(request)


@router.delete("/{request_id}")
async def delete_request(request_id: str, identity: Identity = Depends(get_current_user_dep)):
    RequestService().delete_request(identity, request_id)
    return {"message": "Request deleted"}


@router.get("/{request_id}/documents")
async def list_documents(request_id: str, identity: Identity = Depends(get_current_user_dep)):
    documents = RequestService().get_documents(identity, request_id)
    return {"items": [d.model_dump(mode="json") for d in documents]}


@router.post("/{request_id}/documents", status_code=201)
async def add_document(
    request_id: str,
    body: AddDocumentBody,
    identity: Identity = Depends(get_current_user_dep)
):
    """Record document metadata for a request"""
    document = RequestService().add_document(
        identity, request_id, body.file_name, body.file_type, body.file_url
    )
    return document.model_dump(mode="json")
