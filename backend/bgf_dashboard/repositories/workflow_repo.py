"""Workflow Repository - Data access for workflow records and request history"""
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from .mongo_client import get_collection, store_call
from ..domain.models import WorkflowRecord, HistoryEntry
from ..domain.errors import WorkflowNotFoundError
from ..utils.logger import get_logger
from ..utils.time import format_iso, utc_now

logger = get_logger(__name__)


class WorkflowRepository:
    """Repository for workflow state. History is append-only."""

    def __init__(self):
        self._workflows: Collection = get_collection("request_workflow")
        self._history: Collection = get_collection("request_history")

    # =========================================================================
    # Workflow records
    # =========================================================================

    @store_call
    def create_workflow(self, record: WorkflowRecord) -> WorkflowRecord:
        doc = record.model_dump(mode="json")
        doc["_id"] = record.request_id
        self._workflows.insert_one(doc)
        logger.info(
            f"Created workflow at stage {record.current_stage}",
            extra={"request_id": record.request_id, "stage": record.current_stage}
        )
        return record

    @store_call
    def get_workflow(self, request_id: str) -> Optional[WorkflowRecord]:
        doc = self._workflows.find_one({"request_id": request_id})
        if doc:
            doc.pop("_id", None)
            return WorkflowRecord.model_validate(doc)
        return None

    def get_workflow_or_raise(self, request_id: str) -> WorkflowRecord:
        record = self.get_workflow(request_id)
        if record is None:
            raise WorkflowNotFoundError(f"Workflow for request {request_id} not found")
        return record

    @store_call
    def update_workflow(self, request_id: str, updates: Dict[str, Any]) -> WorkflowRecord:
        updates = dict(updates)
        updates.setdefault("updated_at", format_iso(utc_now()))

        result = self._workflows.find_one_and_update(
            {"request_id": request_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result is None:
            raise WorkflowNotFoundError(f"Workflow for request {request_id} not found")

        result.pop("_id", None)
        return WorkflowRecord.model_validate(result)

    @store_call
    def list_workflows(
        self,
        stages: Optional[List[str]] = None,
        request_types: Optional[List[str]] = None,
        assigned_to: Optional[str] = None
    ) -> List[WorkflowRecord]:
        query: Dict[str, Any] = {}
        if stages is not None:
            query["current_stage"] = {"$in": stages}
        if request_types is not None:
            query["request_type"] = {"$in": request_types}
        if assigned_to:
            query["assigned_to"] = assigned_to

        records = []
        for doc in self._workflows.find(query).sort("updated_at", DESCENDING):
            doc.pop("_id", None)
            records.append(WorkflowRecord.model_validate(doc))
        return records

    @store_call
    def delete_workflow(self, request_id: str) -> None:
        """Remove the workflow record; history rows are kept"""
        self._workflows.delete_one({"request_id": request_id})

    # =========================================================================
    # History (append-only)
    # =========================================================================

    @store_call
    def append_history(self, entry: HistoryEntry) -> HistoryEntry:
        doc = entry.model_dump(mode="json")
        doc["_id"] = entry.history_id
        self._history.insert_one(doc)
        return entry

    @store_call
    def get_last_history(self, request_id: str) -> Optional[HistoryEntry]:
        doc = self._history.find_one(
            {"request_id": request_id},
            sort=[("sequence", DESCENDING)]
        )
        if doc:
            doc.pop("_id", None)
            return HistoryEntry.model_validate(doc)
        return None

    @store_call
    def get_history(self, request_id: str) -> List[HistoryEntry]:
        """History entries in the order they were written"""
        entries = []
        for doc in self._history.find({"request_id": request_id}).sort("sequence", ASCENDING):
            doc.pop("_id", None)
            entries.append(HistoryEntry.model_validate(doc))
        return entries

    @store_call
    def get_recent_history(self, limit: int = 10) -> List[HistoryEntry]:
        entries = []
        for doc in self._history.find({}).sort("created_at", DESCENDING).limit(limit):
            doc.pop("_id", None)
            entries.append(HistoryEntry.model_validate(doc))
        return entries
