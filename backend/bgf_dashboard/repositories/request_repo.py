"""Request Repository - Data access for requests and their documents"""
import re
from typing import Any, Dict, List, Optional, Tuple
from pymongo.collection import Collection
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from .mongo_client import get_collection, store_call
from ..domain.models import Request, RequestDocument
from ..domain.errors import RequestNotFoundError
from ..utils.logger import get_logger
from ..utils.time import format_iso, utc_now

logger = get_logger(__name__)


class RequestRepository:
    """Repository for request operations"""

    def __init__(self):
        self._requests: Collection = get_collection("requests")
        self._documents: Collection = get_collection("request_documents")

    # =========================================================================
    # Requests
    # =========================================================================

    @store_call
    def create_request(self, request: Request) -> Request:
        doc = request.model_dump(mode="json")
        doc["_id"] = request.request_id

        self._requests.insert_one(doc)
        logger.info(
            f"Created request: {request.ticket_number}",
            extra={"request_id": request.request_id, "ticket_number": request.ticket_number}
        )
        return request

    @store_call
    def get_request(self, request_id: str) -> Optional[Request]:
        doc = self._requests.find_one({"request_id": request_id})
        if doc:
            doc.pop("_id", None)
            return Request.model_validate(doc)
        return None

    def get_request_or_raise(self, request_id: str) -> Request:
        request = self.get_request(request_id)
        if request is None:
            raise RequestNotFoundError(f"Request {request_id} not found")
        return request

    @store_call
    def update_request(self, request_id: str, updates: Dict[str, Any]) -> Request:
        """Apply field updates and bump updated_at. Last write wins."""
        updates = dict(updates)
        updates["updated_at"] = format_iso(utc_now())

        result = self._requests.find_one_and_update(
            {"request_id": request_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result is None:
            raise RequestNotFoundError(f"Request {request_id} not found")

        result.pop("_id", None)
        return Request.model_validate(result)

    @store_call
    def delete_request(self, request_id: str) -> None:
        result = self._requests.delete_one({"request_id": request_id})
        if result.deleted_count == 0:
            raise RequestNotFoundError(f"Request {request_id} not found")
        self._documents.delete_many({"request_id": request_id})
        logger.info(f"Deleted request {request_id}", extra={"request_id": request_id})

    @staticmethod
    def _build_query(
        requester_id: Optional[str] = None,
        status: Optional[str] = None,
        request_type: Optional[str] = None,
        search: Optional[str] = None,
        request_ids: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if requester_id:
            query["requester.id"] = requester_id
        if status:
            query["status"] = status
        if request_type:
            query["type"] = request_type
        if request_ids is not None:
            query["request_id"] = {"$in": request_ids}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [
                {"title": pattern},
                {"description": pattern},
                {"ticket_number": pattern},
            ]
        return query

    @store_call
    def list_requests(
        self,
        requester_id: Optional[str] = None,
        status: Optional[str] = None,
        request_type: Optional[str] = None,
        search: Optional[str] = None,
        request_ids: Optional[List[str]] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Request], int]:
        """List requests, newest first. Returns (page, total matching)."""
        query = self._build_query(requester_id, status, request_type, search, request_ids)
        total = self._requests.count_documents(query)
        cursor = self._requests.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)

        requests = []
        for doc in cursor:
            doc.pop("_id", None)
            requests.append(Request.model_validate(doc))
        return requests, total

    @store_call
    def iter_all(self, requester_id: Optional[str] = None) -> List[Request]:
        """All requests (optionally one requester's), used by reports"""
        query = self._build_query(requester_id=requester_id)
        requests = []
        for doc in self._requests.find(query).sort("created_at", ASCENDING):
            doc.pop("_id", None)
            requests.append(Request.model_validate(doc))
        return requests

    # =========================================================================
    # Documents
    # =========================================================================

    @store_call
    def add_document(self, document: RequestDocument) -> RequestDocument:
        doc = document.model_dump(mode="json")
        doc["_id"] = document.document_id
        self._documents.insert_one(doc)
        logger.info(
            f"Attached document {document.file_name}",
            extra={"request_id": document.request_id}
        )
        return document

    @store_call
    def get_documents(self, request_id: str) -> List[RequestDocument]:
        cursor = self._documents.find({"request_id": request_id}).sort("created_at", ASCENDING)
        documents = []
        for doc in cursor:
            doc.pop("_id", None)
            documents.append(RequestDocument.model_validate(doc))
        return documents
