"""Workflow Service - Stage transitions, delegation and approvals with notifications"""
from typing import Any, Dict, List, Optional, Tuple, Union

from ..domain.enums import (
    ActivityAction, NotificationCategory, NotificationType, UserRole, WorkflowStage
)
from ..domain.errors import PermissionDeniedError, StoreUnavailableError
from ..domain.models import (
    HistoryEntry, RegularUserIdentity, Request, StaffIdentity, WorkflowRecord,
    actor_snapshot, has_staff_role
)
from ..domain.stage_graphs import StageNode, get_stage_graph
from ..engine.stage_engine import StageEngine
from ..repositories.request_repo import RequestRepository
from ..repositories.workflow_repo import WorkflowRepository
from ..utils.logger import get_logger
from .activity_log_service import ActivityLogService
from .notification_service import NotificationService
from .request_service import can_view_request, is_requester

logger = get_logger(__name__)

Identity = Union[RegularUserIdentity, StaffIdentity]

# Notification severity by destination stage
STAGE_NOTIFICATION_TYPES = {
    WorkflowStage.APPROVED.value: NotificationType.SUCCESS,
    WorkflowStage.REJECTED.value: NotificationType.ERROR,
    WorkflowStage.CANCELLED.value: NotificationType.WARNING,
}


class WorkflowService:
    """
    Workflow operations exposed to the API

    Wraps the stage engine with authorization, activity logging and the
    notifications sent on every transition and delegation.
    """

    def __init__(
        self,
        engine: Optional[StageEngine] = None,
        request_repo: Optional[RequestRepository] = None,
        workflow_repo: Optional[WorkflowRepository] = None,
        notifications: Optional[NotificationService] = None,
        activity: Optional[ActivityLogService] = None
    ):
        self.request_repo = request_repo or RequestRepository()
        self.workflow_repo = workflow_repo or WorkflowRepository()
        self.engine = engine or StageEngine(self.workflow_repo, self.request_repo)
        self.notifications = notifications or NotificationService()
        self.activity = activity or ActivityLogService()

    def _load(self, identity: Identity, request_id: str) -> Request:
        request = self.request_repo.get_request_or_raise(request_id)
        if not can_view_request(identity, request):
            raise PermissionDeniedError("You do not have access to this request")
        return request

    def _notify(self, user_id: str, request: Request, email: Optional[str] = None, **kwargs) -> None:
        """Send a notification; the workflow change has already been committed"""
        try:
            self.notifications.create_notification(
                user_id=user_id,
                related_entity_type="request",
                related_entity_id=request.request_id,
                send_email=bool(email),
                email_recipient=email,
                **kwargs
            )
        except StoreUnavailableError as e:
            logger.warning(
                f"Failed to send workflow notification: {e}",
                extra={"request_id": request.request_id, "user_id": user_id}
            )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_workflow(self, identity: Identity, request_id: str) -> Tuple[WorkflowRecord, Optional[StageNode], List[StageNode]]:
        """Current record, its stage node and the nodes reachable next"""
        self._load(identity, request_id)
        record = self.engine.get_workflow(request_id)
        graph = get_stage_graph(record.request_type)
        next_nodes = [graph.get(s) for s in graph.next_stages(record.current_stage)]
        return record, graph.get(record.current_stage), next_nodes

    def get_history(self, identity: Identity, request_id: str) -> List[HistoryEntry]:
        self._load(identity, request_id)
        return self.engine.get_history(request_id)

    def get_pending_approvals(self, identity: Identity) -> List[Dict[str, Any]]:
        """
        Requests waiting on the caller

        A request is pending for a role when its current stage names that role
        as required. Admins see every open request. Requests delegated to the
        caller are included regardless of stage.
        """
        if not has_staff_role(identity):
            raise PermissionDeniedError("Approvals are only available to staff")

        pending = []
        for record in self.workflow_repo.list_workflows():
            node = get_stage_graph(record.request_type).get(record.current_stage)
            if node is None or node.is_terminal:
                continue
            awaiting_role = (
                identity.role == UserRole.ADMIN
                or node.required_role == identity.role
                or record.assigned_to == identity.id
            )
            if awaiting_role:
                pending.append({"workflow": record, "stage": node})

        requests = {}
        if pending:
            items, _ = self.request_repo.list_requests(
                request_ids=[p["workflow"].request_id for p in pending],
                limit=len(pending)
            )
            requests = {r.request_id: r for r in items}

        return [
            dict(p, request=requests[p["workflow"].request_id])
            for p in pending
            if p["workflow"].request_id in requests
        ]

    # =========================================================================
    # Commands
    # =========================================================================

    def update_stage(
        self,
        identity: Identity,
        request_id: str,
        new_stage: str,
        comment: Optional[str] = None
    ) -> WorkflowRecord:
        """
        Move a request to another stage and notify the requester

        Staff may perform any transition the graph allows. A requester may
        only withdraw their own request.
        """
        request = self._load(identity, request_id)
        withdrawing = new_stage == WorkflowStage.CANCELLED.value and is_requester(identity, request)
        if not (has_staff_role(identity) or withdrawing):
            raise PermissionDeniedError("Only staff can change a request's stage")

        record = self.engine.update_stage(request_id, new_stage, identity, comment)
        node = get_stage_graph(record.request_type).get(new_stage)

        self.activity.record(
            actor_snapshot(identity), ActivityAction.STAGE_CHANGE,
            entity_type="request", entity_id=request_id,
            details={"new_stage": new_stage, "comment": comment}
        )

        message = f"Your request {request.ticket_number} is now at stage: {node.name}."
        if comment:
            message = f"{message} Comment: {comment}"
        self._notify(
            request.requester.id,
            request,
            email=request.requester.email,
            title="Request status updated",
            message=message,
            type=STAGE_NOTIFICATION_TYPES.get(new_stage, NotificationType.INFO),
            category=NotificationCategory.REQUEST_STATUS
        )
        return record

    def delegate_request(
        self,
        identity: Identity,
        request_id: str,
        staff_id: str,
        reason: Optional[str] = None,
        staff_name: Optional[str] = None
    ) -> WorkflowRecord:
        """Assign a request to a staff member and notify them"""
        if not has_staff_role(identity):
            raise PermissionDeniedError("Only staff can delegate requests")
        request = self._load(identity, request_id)

        record = self.engine.delegate_request(request_id, staff_id, identity, reason, staff_name)

        self.activity.record(
            actor_snapshot(identity), ActivityAction.DELEGATE_REQUEST,
            entity_type="request", entity_id=request_id,
            details={"staff_id": staff_id, "reason": reason}
        )
        message = f"Request {request.ticket_number} has been delegated to you by {identity.display_name}."
        if reason:
            message = f"{message} Reason: {reason}"
        self._notify(
            staff_id,
            request,
            title="Request assigned to you",
            message=message,
            category=NotificationCategory.REQUEST_ASSIGNMENT
        )
        return record

    def add_comment(self, identity: Identity, request_id: str, comment: str) -> HistoryEntry:
        """Comment on a request; the requester is told when someone else comments"""
        request = self._load(identity, request_id)
        entry = self.engine.add_comment(request_id, identity, comment)

        self.activity.record(
            actor_snapshot(identity), ActivityAction.ADD_COMMENT,
            entity_type="request", entity_id=request_id
        )
        if not is_requester(identity, request):
            self._notify(
                request.requester.id,
                request,
                title="New comment on your request",
                message=f"{identity.display_name} commented on {request.ticket_number}: {entry.details}",
                category=NotificationCategory.REQUEST_COMMENT
            )
        return entry
