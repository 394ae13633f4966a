"""Request Service - Request lifecycle outside of stage transitions"""
from typing import Any, Dict, List, Optional, Tuple, Union

from ..domain.enums import (
    ActivityAction, NotificationCategory, NotificationType, RequestStatus, RequestType,
    UserRole, REQUEST_TYPE_LABELS
)
from ..domain.errors import InvalidStateError, PermissionDeniedError, StoreUnavailableError, ValidationError
from ..domain.models import (
    Request, RequestDocument, RequesterSnapshot, RegularUserIdentity, StaffIdentity,
    actor_snapshot, has_staff_role
)
from ..engine.stage_engine import StageEngine
from ..repositories.request_repo import RequestRepository
from ..repositories.workflow_repo import WorkflowRepository
from ..utils.idgen import generate_document_id, generate_request_id, generate_ticket_number
from ..utils.time import utc_now
from ..utils.logger import get_logger
from .activity_log_service import ActivityLogService
from .notification_service import NotificationService

logger = get_logger(__name__)

Identity = Union[RegularUserIdentity, StaffIdentity]

EDITABLE_FIELDS = ("title", "description", "amount")


def is_requester(identity: Identity, request: Request) -> bool:
    return request.requester.id == identity.id


def can_view_request(identity: Identity, request: Request) -> bool:
    """Staff see every request; beneficiaries only their own"""
    return has_staff_role(identity) or is_requester(identity, request)


class RequestService:
    """Create, list, edit and delete requests"""

    def __init__(
        self,
        repo: Optional[RequestRepository] = None,
        workflow_repo: Optional[WorkflowRepository] = None,
        engine: Optional[StageEngine] = None,
        notifications: Optional[NotificationService] = None,
        activity: Optional[ActivityLogService] = None
    ):
        self.repo = repo or RequestRepository()
        self.workflow_repo = workflow_repo or WorkflowRepository()
        self.engine = engine or StageEngine(self.workflow_repo, self.repo)
        self.notifications = notifications or NotificationService()
        self.activity = activity or ActivityLogService()

    # =========================================================================
    # Create
    # =========================================================================

    def create_request(
        self,
        identity: Identity,
        title: str,
        request_type: RequestType,
        description: str = "",
        amount: Optional[float] = None
    ) -> Request:
        """Create a request and start its workflow at the initial stage"""
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if amount is not None and amount < 0:
            raise ValidationError("Amount cannot be negative")

        now = utc_now()
        request = Request(
            request_id=generate_request_id(),
            ticket_number=generate_ticket_number(),
            title=title,
            description=description or "",
            type=request_type,
            status=RequestStatus.SUBMITTED,
            amount=amount,
            requester=RequesterSnapshot(
                id=identity.id,
                name=identity.display_name,
                email=identity.email if isinstance(identity, RegularUserIdentity) else None
            ),
            created_at=now,
            updated_at=now
        )
        self.repo.create_request(request)
        try:
            self.engine.initialize_workflow(request, identity)
        except StoreUnavailableError:
            self._discard(request.request_id)
            raise

        self.activity.record(
            actor_snapshot(identity), ActivityAction.CREATE_REQUEST,
            entity_type="request", entity_id=request.request_id,
            details={"ticket_number": request.ticket_number, "type": request_type.value}
        )
        self._notify(
            request,
            title="Request submitted",
            message=(
                f"Your {REQUEST_TYPE_LABELS[request_type]} request {request.ticket_number} "
                f"has been submitted for review."
            ),
            type=NotificationType.SUCCESS,
            category=NotificationCategory.REQUEST_STATUS
        )
        return request

    def _discard(self, request_id: str) -> None:
        """Remove a request whose workflow could not be started"""
        try:
            self.workflow_repo.delete_workflow(request_id)
            self.repo.delete_request(request_id)
        except StoreUnavailableError as e:
            logger.error(
                f"Failed to discard request without workflow: {e}",
                extra={"request_id": request_id}
            )

    def _notify(self, request: Request, **kwargs) -> None:
        """Notify the requester; a failed notification does not fail the request"""
        try:
            self.notifications.create_notification(
                user_id=request.requester.id,
                related_entity_type="request",
                related_entity_id=request.request_id,
                send_email=bool(request.requester.email),
                email_recipient=request.requester.email,
                **kwargs
            )
        except StoreUnavailableError as e:
            logger.warning(
                f"Failed to notify requester: {e}",
                extra={"request_id": request.request_id}
            )

    # =========================================================================
    # Read
    # =========================================================================

    def list_requests(
        self,
        identity: Identity,
        status: Optional[RequestStatus] = None,
        request_type: Optional[RequestType] = None,
        search: Optional[str] = None,
        mine: bool = False,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Request], int]:
        """Beneficiaries only ever see their own requests"""
        requester_id = identity.id if (mine or not has_staff_role(identity)) else None
        return self.repo.list_requests(
            requester_id=requester_id,
            status=status.value if status else None,
            request_type=request_type.value if request_type else None,
            search=search,
            skip=skip,
            limit=limit
        )

    def get_request(self, identity: Identity, request_id: str) -> Request:
        request = self.repo.get_request_or_raise(request_id)
        if not can_view_request(identity, request):
            raise PermissionDeniedError("You do not have access to this request")
        return request

    def get_request_detail(self, identity: Identity, request_id: str) -> Dict[str, Any]:
        """Request with its documents, workflow record, history and next stages"""
        request = self.get_request(identity, request_id)
        workflow = self.workflow_repo.get_workflow(request_id)
        next_stages: List[str] = []
        if workflow is not None:
            next_stages = self.engine.get_next_possible_stages(workflow.request_type, workflow.current_stage)

        return {
            "request": request,
            "documents": self.repo.get_documents(request_id),
            "workflow": workflow,
            "history": self.engine.get_history(request_id),
            "next_stages": next_stages,
        }

    # =========================================================================
    # Update / delete
    # =========================================================================

    def update_request(self, identity: Identity, request_id: str, changes: Dict[str, Any]) -> Request:
        """Edit title, description or amount while the request is still open"""
        request = self.repo.get_request_or_raise(request_id)
        if not (is_requester(identity, request) or has_staff_role(identity)):
            raise PermissionDeniedError("Only the requester or staff can edit this request")

        workflow = self.workflow_repo.get_workflow(request_id)
        if workflow is not None and self.engine.is_terminal(workflow):
            raise InvalidStateError(
                f"Request is closed at stage '{workflow.current_stage}'",
                details={"current_stage": workflow.current_stage}
            )

        updates = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}
        if not updates:
            raise ValidationError("No editable fields provided", details={"allowed": list(EDITABLE_FIELDS)})
        if "title" in updates and not str(updates["title"]).strip():
            raise ValidationError("Title cannot be empty")
        if "amount" in updates and updates["amount"] < 0:
            raise ValidationError("Amount cannot be negative")

        updated = self.repo.update_request(request_id, updates)
        self.activity.record(
            actor_snapshot(identity), ActivityAction.UPDATE_REQUEST,
            entity_type="request", entity_id=request_id, details={"fields": sorted(updates)}
        )
        return updated

    def delete_request(self, identity: Identity, request_id: str) -> None:
        if identity.role != UserRole.ADMIN:
            raise PermissionDeniedError("Only administrators can delete requests")

        self.repo.delete_request(request_id)
        self.workflow_repo.delete_workflow(request_id)
        self.activity.record(
            actor_snapshot(identity), ActivityAction.DELETE_REQUEST,
            entity_type="request", entity_id=request_id
        )

    # =========================================================================
    # Documents
    # =========================================================================

    def add_document(
        self,
        identity: Identity,
        request_id: str,
        file_name: str,
        file_type: str,
        file_url: str
    ) -> RequestDocument:
        """Attach document metadata; the file itself lives elsewhere"""
        request = self.get_request(identity, request_id)
        if not file_name or not file_url:
            raise ValidationError("file_name and file_url are required")

        document = RequestDocument(
            document_id=generate_document_id(),
            request_id=request_id,
            file_name=file_name,
            file_type=file_type or "application/octet-stream",
            file_url=file_url,
            uploaded_by=identity.id,
            created_at=utc_now()
        )
        self.repo.add_document(document)

        self.activity.record(
            actor_snapshot(identity), ActivityAction.UPLOAD_DOCUMENT,
            entity_type="request", entity_id=request_id, details={"file_name": file_name}
        )
        if not is_requester(identity, request):
            self._notify(
                request,
                title="Document added",
                message=f"A document ({file_name}) was added to your request {request.ticket_number}.",
                category=NotificationCategory.REQUEST_DOCUMENT
            )
        return document

    def get_documents(self, identity: Identity, request_id: str) -> List[RequestDocument]:
        self.get_request(identity, request_id)
        return self.repo.get_documents(request_id)
