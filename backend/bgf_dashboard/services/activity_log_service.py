"""Activity Log Service - Records and queries user activity"""
from typing import Any, Dict, List, Optional, Tuple

from ..domain.enums import ActivityAction
from ..domain.errors import StoreUnavailableError
from ..domain.models import ActivityLog, ActorSnapshot
from ..repositories.activity_log_repo import ActivityLogRepository
from ..utils.idgen import generate_activity_log_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ActivityLogService:
    """Service for the activity audit trail"""

    def __init__(self, repo: Optional[ActivityLogRepository] = None):
        self._repo = repo

    @property
    def repo(self) -> ActivityLogRepository:
        if self._repo is None:
            self._repo = ActivityLogRepository()
        return self._repo

    def record(
        self,
        actor: ActorSnapshot,
        action: ActivityAction,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> Optional[ActivityLog]:
        """
        Append an activity log entry.

        A failed write is logged and does not fail the action being recorded.
        """
        log = ActivityLog(
            log_id=generate_activity_log_id(),
            user_id=actor.id,
            user_name=actor.name,
            action=action.value,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
            created_at=utc_now()
        )
        try:
            return self.repo.create_log(log)
        except StoreUnavailableError as e:
            logger.warning(
                f"Failed to record activity {action.value}: {e}",
                extra={"user_id": actor.id, "action": action.value}
            )
            return None

    def list_logs(
        self,
        user_id: Optional[str] = None,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[ActivityLog], int]:
        return self.repo.list_logs(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            skip=skip,
            limit=limit
        )

    def list_actions(self) -> List[str]:
        return self.repo.distinct_actions()
