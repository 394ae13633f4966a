"""Activity Log Repository - Append-only audit trail of user actions"""
from typing import Any, Dict, List, Optional, Tuple
from pymongo.collection import Collection
from pymongo import DESCENDING

from .mongo_client import get_collection, store_call
from ..domain.models import ActivityLog
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ActivityLogRepository:
    """Repository for activity log operations (append-only)"""

    def __init__(self):
        self._logs: Collection = get_collection("activity_logs")

    @store_call
    def create_log(self, log: ActivityLog) -> ActivityLog:
        doc = log.model_dump(mode="json")
        doc["_id"] = log.log_id
        self._logs.insert_one(doc)
        return log

    @store_call
    def list_logs(
        self,
        user_id: Optional[str] = None,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[ActivityLog], int]:
        """Logs newest first. Returns (page, total matching)."""
        query: Dict[str, Any] = {}
        if user_id:
            query["user_id"] = user_id
        if action:
            query["action"] = action
        if entity_type:
            query["entity_type"] = entity_type
        if entity_id:
            query["entity_id"] = entity_id

        total = self._logs.count_documents(query)
        cursor = self._logs.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)

        logs = []
        for doc in cursor:
            doc.pop("_id", None)
            logs.append(ActivityLog.model_validate(doc))
        return logs, total

    @store_call
    def distinct_actions(self) -> List[str]:
        return sorted(self._logs.distinct("action"))
