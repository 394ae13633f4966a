"""History Writer - Append-only request history"""
from typing import Optional

from ..domain.models import ActorSnapshot, HistoryEntry
from ..domain.enums import HistoryAction
from ..repositories.workflow_repo import WorkflowRepository
from ..utils.idgen import generate_history_id
from ..utils.time import Clock, next_after, utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class HistoryWriter:
    """
    Write history entries (append-only)

    Each entry gets the next sequence number for its request and a created_at
    strictly after the previous entry's, even when the clock stalls or steps
    backwards.
    """

    def __init__(self, repo: Optional[WorkflowRepository] = None, clock: Clock = utc_now):
        self.repo = repo or WorkflowRepository()
        self.clock = clock

    def write_entry(
        self,
        request_id: str,
        action: HistoryAction,
        actor: ActorSnapshot,
        previous_status: Optional[str] = None,
        new_status: Optional[str] = None,
        details: Optional[str] = None
    ) -> HistoryEntry:
        """Write a single history entry"""
        last = self.repo.get_last_history(request_id)

        entry = HistoryEntry(
            history_id=generate_history_id(),
            request_id=request_id,
            sequence=(last.sequence + 1) if last else 1,
            action=action,
            previous_status=previous_status,
            new_status=new_status,
            actor=actor,
            details=details,
            created_at=next_after(self.clock(), last.created_at if last else None)
        )
        self.repo.append_history(entry)

        logger.info(
            f"History {action.value} #{entry.sequence}",
            extra={"request_id": request_id, "action": action.value, "user_id": actor.id}
        )
        return entry

    def write_status_change(
        self,
        request_id: str,
        actor: ActorSnapshot,
        previous_status: Optional[str],
        new_status: str,
        comment: Optional[str] = None
    ) -> HistoryEntry:
        return self.write_entry(
            request_id=request_id,
            action=HistoryAction.STATUS_CHANGE,
            actor=actor,
            previous_status=previous_status,
            new_status=new_status,
            details=comment
        )

    def write_assignment(
        self,
        request_id: str,
        actor: ActorSnapshot,
        details: str
    ) -> HistoryEntry:
        return self.write_entry(
            request_id=request_id,
            action=HistoryAction.ASSIGNMENT,
            actor=actor,
            details=details
        )

    def write_comment(
        self,
        request_id: str,
        actor: ActorSnapshot,
        comment: str
    ) -> HistoryEntry:
        return self.write_entry(
            request_id=request_id,
            action=HistoryAction.COMMENT,
            actor=actor,
            details=comment
        )
