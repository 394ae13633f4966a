"""Dashboard Service - Role-aware landing page summary"""
from typing import Any, Dict, Optional, Union

from ..domain.models import RegularUserIdentity, StaffIdentity, has_staff_role
from ..repositories.request_repo import RequestRepository
from ..repositories.workflow_repo import WorkflowRepository
from .notification_service import NotificationService
from .report_service import ReportService, status_progress
from .workflow_service import WorkflowService

Identity = Union[RegularUserIdentity, StaffIdentity]

RECENT_LIMIT = 5


class DashboardService:
    """Builds the dashboard payload for beneficiaries and staff"""

    def __init__(
        self,
        request_repo: Optional[RequestRepository] = None,
        workflow_repo: Optional[WorkflowRepository] = None,
        notifications: Optional[NotificationService] = None,
        workflows: Optional[WorkflowService] = None
    ):
        self.request_repo = request_repo or RequestRepository()
        self.workflow_repo = workflow_repo or WorkflowRepository()
        self.notifications = notifications or NotificationService()
        self.workflows = workflows or WorkflowService(
            request_repo=self.request_repo,
            workflow_repo=self.workflow_repo,
            notifications=self.notifications
        )
        self.reports = ReportService(self.request_repo)

    def get_dashboard(self, identity: Identity) -> Dict[str, Any]:
        unread = self.notifications.get_unread_count(identity.id)

        if not has_staff_role(identity):
            recent, _ = self.request_repo.list_requests(requester_id=identity.id, limit=RECENT_LIMIT)
            return {
                "view": "beneficiary",
                "unread_notifications": unread,
                "summary": self.reports.build_report(requester_id=identity.id),
                "recent_requests": [
                    dict(r.model_dump(mode="json"), progress=status_progress(r.status))
                    for r in recent
                ],
            }

        pending = self.workflows.get_pending_approvals(identity)
        recent, _ = self.request_repo.list_requests(limit=RECENT_LIMIT)
        return {
            "view": "staff",
            "unread_notifications": unread,
            "summary": self.reports.build_report(),
            "pending_approvals": len(pending),
            "pending_preview": [
                {
                    "request_id": p["request"].request_id,
                    "ticket_number": p["request"].ticket_number,
                    "title": p["request"].title,
                    "stage": p["stage"].id,
                    "stage_name": p["stage"].name,
                }
                for p in pending[:RECENT_LIMIT]
            ],
            "recent_requests": [r.model_dump(mode="json") for r in recent],
            "recent_activity": [
                h.model_dump(mode="json") for h in self.workflow_repo.get_recent_history(RECENT_LIMIT)
            ],
        }
