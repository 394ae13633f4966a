"""Stage Engine - Moves requests through their stage graphs

The engine only moves a request when asked. It never advances on its own,
has no timers, and does not notify anyone; callers fan out notifications.
Concurrent updates are last-write-wins.
"""
from typing import List, Optional, Union

from ..domain.models import (
    ActorSnapshot, HistoryEntry, Request, WorkflowRecord, actor_snapshot,
    RegularUserIdentity, StaffIdentity
)
from ..domain.errors import InvalidTransitionError, StoreUnavailableError, ValidationError
from ..domain.stage_graphs import StageGraph, StageNode, get_stage_graph
from ..repositories.request_repo import RequestRepository
from ..repositories.workflow_repo import WorkflowRepository
from .history_writer import HistoryWriter
from ..utils.time import Clock, format_iso, utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

Actor = Union[RegularUserIdentity, StaffIdentity, ActorSnapshot]


def _snapshot(actor: Actor) -> ActorSnapshot:
    if isinstance(actor, ActorSnapshot):
        return actor
    return actor_snapshot(actor)


def get_next_possible_stages(request_type: str, current_stage: str) -> List[str]:
    """
    Stages reachable in one step from current_stage

    Unknown stages and terminal stages yield an empty list.
    """
    return get_stage_graph(request_type).next_stages(current_stage)


class StageEngine:
    """Stage transitions, delegation and comments for requests"""

    def __init__(
        self,
        workflow_repo: Optional[WorkflowRepository] = None,
        request_repo: Optional[RequestRepository] = None,
        history: Optional[HistoryWriter] = None,
        clock: Clock = utc_now
    ):
        self.workflow_repo = workflow_repo or WorkflowRepository()
        self.request_repo = request_repo or RequestRepository()
        self.history = history or HistoryWriter(self.workflow_repo, clock=clock)
        self.clock = clock

    # =========================================================================
    # Queries
    # =========================================================================

    def get_graph(self, request_type: str) -> StageGraph:
        return get_stage_graph(request_type)

    def get_stage(self, request_type: str, stage_id: str) -> Optional[StageNode]:
        return get_stage_graph(request_type).get(stage_id)

    def get_next_possible_stages(self, request_type: str, current_stage: str) -> List[str]:
        return get_next_possible_stages(request_type, current_stage)

    def get_workflow(self, request_id: str) -> WorkflowRecord:
        return self.workflow_repo.get_workflow_or_raise(request_id)

    def get_history(self, request_id: str) -> List[HistoryEntry]:
        return self.workflow_repo.get_history(request_id)

    def is_terminal(self, record: WorkflowRecord) -> bool:
        node = self.get_stage(record.request_type, record.current_stage)
        return node is not None and node.is_terminal

    # =========================================================================
    # Commands
    # =========================================================================

    def initialize_workflow(self, request: Request, actor: Actor) -> WorkflowRecord:
        """Place a new request at its graph's initial stage"""
        graph = get_stage_graph(request.type.value)
        now = self.clock()

        record = WorkflowRecord(
            request_id=request.request_id,
            request_type=request.type.value,
            current_stage=graph.initial_stage,
            created_at=now,
            updated_at=now
        )
        self.workflow_repo.create_workflow(record)

        self.history.write_status_change(
            request_id=request.request_id,
            actor=_snapshot(actor),
            previous_status=None,
            new_status=graph.initial_stage,
            comment="Request submitted"
        )
        return record

    def update_stage(
        self,
        request_id: str,
        new_stage: str,
        actor: Actor,
        comment: Optional[str] = None
    ) -> WorkflowRecord:
        """
        Move a request to new_stage

        The allowed set is derived from the request type and the persisted
        current stage at call time. Writes the workflow record, the request
        status and exactly one status_change history entry.

        Raises:
            InvalidTransitionError: new_stage is not reachable in one step
            StoreUnavailableError: a write failed; the request is put back at
                its previous stage
        """
        record = self.workflow_repo.get_workflow_or_raise(request_id)
        graph = get_stage_graph(record.request_type)
        allowed = graph.next_stages(record.current_stage)

        if new_stage not in allowed:
            logger.warning(
                f"Rejected transition {record.current_stage} -> {new_stage}",
                extra={"request_id": request_id, "stage": new_stage, "previous_stage": record.current_stage}
            )
            raise InvalidTransitionError(
                f"Cannot move request from '{record.current_stage}' to '{new_stage}'",
                details={
                    "current_stage": record.current_stage,
                    "requested_stage": new_stage,
                    "allowed_stages": allowed,
                }
            )

        previous_stage = record.current_stage
        updated = self.workflow_repo.update_workflow(
            request_id,
            {"current_stage": new_stage, "updated_at": format_iso(self.clock())}
        )

        node = graph.get(new_stage)
        try:
            self.request_repo.update_request(request_id, {"status": node.request_status.value})
            self.history.write_status_change(
                request_id=request_id,
                actor=_snapshot(actor),
                previous_status=previous_stage,
                new_status=new_stage,
                comment=comment
            )
        except StoreUnavailableError:
            self._restore_stage(request_id, graph.get(previous_stage))
            raise

        logger.info(
            f"Request moved {previous_stage} -> {new_stage}",
            extra={"request_id": request_id, "stage": new_stage, "previous_stage": previous_stage}
        )
        return updated

    def _restore_stage(self, request_id: str, node: StageNode) -> None:
        """Put the workflow and request back at node after a partial transition"""
        try:
            self.workflow_repo.update_workflow(
                request_id,
                {"current_stage": node.id, "updated_at": format_iso(self.clock())}
            )
            self.request_repo.update_request(request_id, {"status": node.request_status.value})
        except StoreUnavailableError as e:
            logger.error(
                f"Failed to restore stage {node.id}: {e}",
                extra={"request_id": request_id, "stage": node.id}
            )
        else:
            logger.warning(
                f"Transition aborted, request restored to {node.id}",
                extra={"request_id": request_id, "stage": node.id}
            )

    def delegate_request(
        self,
        request_id: str,
        staff_id: str,
        actor: Actor,
        reason: Optional[str] = None,
        staff_name: Optional[str] = None
    ) -> WorkflowRecord:
        """
        Assign a request to a staff member

        The delegatee's role is not checked against the current stage.
        """
        if not staff_id:
            raise ValidationError("staff_id is required")

        self.workflow_repo.get_workflow_or_raise(request_id)
        updated = self.workflow_repo.update_workflow(
            request_id,
            {
                "assigned_to": staff_id,
                "assigned_to_name": staff_name,
                "updated_at": format_iso(self.clock()),
            }
        )

        details = reason or f"Request delegated to {staff_name or staff_id}"
        self.history.write_assignment(request_id, _snapshot(actor), details)

        logger.info(
            f"Request delegated to {staff_id}",
            extra={"request_id": request_id, "user_id": staff_id}
        )
        return updated

    def add_comment(self, request_id: str, actor: Actor, comment: str) -> HistoryEntry:
        """Append a comment to the request history"""
        if not comment or not comment.strip():
            raise ValidationError("Comment cannot be empty")

        self.workflow_repo.get_workflow_or_raise(request_id)
        return self.history.write_comment(request_id, _snapshot(actor), comment.strip())
