"""Report Service - Aggregate request statistics"""
from collections import Counter, OrderedDict
from typing import Any, Dict, List, Optional

from ..domain.enums import RequestStatus, RequestType, REQUEST_TYPE_LABELS, STATUS_PROGRESSION
from ..domain.models import Request
from ..repositories.request_repo import RequestRepository
from ..utils.time import month_key
from ..utils.logger import get_logger

logger = get_logger(__name__)


def status_progress(status: RequestStatus) -> Optional[int]:
    """Percent complete along the linear progression; None for side states"""
    status = RequestStatus(status)
    if status not in STATUS_PROGRESSION:
        return None
    return round(STATUS_PROGRESSION.index(status) * 100 / (len(STATUS_PROGRESSION) - 1))


class ReportService:
    """Service computing request reports"""

    def __init__(self, repo: Optional[RequestRepository] = None):
        self.repo = repo or RequestRepository()

    def build_report(self, requester_id: Optional[str] = None) -> Dict[str, Any]:
        """Totals by status and type, approved amount and monthly submissions"""
        requests = self.repo.iter_all(requester_id=requester_id)
        return summarize(requests)


def summarize(requests: List[Request]) -> Dict[str, Any]:
    by_status = Counter(r.status.value for r in requests)
    by_type = Counter(r.type.value for r in requests)

    monthly: "OrderedDict[str, int]" = OrderedDict()
    for r in sorted(requests, key=lambda r: r.created_at):
        key = month_key(r.created_at)
        monthly[key] = monthly.get(key, 0) + 1

    approved = [r for r in requests if r.status == RequestStatus.APPROVED]
    open_progress = [
        p for p in (status_progress(r.status) for r in requests)
        if p is not None and p < 100
    ]

    return {
        "total": len(requests),
        "by_status": {s.value: by_status.get(s.value, 0) for s in RequestStatus},
        "by_type": [
            {"type": t.value, "label": REQUEST_TYPE_LABELS[t], "count": by_type.get(t.value, 0)}
            for t in RequestType
        ],
        "approved_count": len(approved),
        "approved_amount": round(sum(r.amount or 0 for r in approved), 2),
        "approval_rate": round(len(approved) * 100 / len(requests), 1) if requests else 0.0,
        "monthly_submissions": [{"month": k, "count": v} for k, v in monthly.items()],
        "status_progress": {s.value: status_progress(s) for s in STATUS_PROGRESSION},
        "average_open_progress": round(sum(open_progress) / len(open_progress), 1) if open_progress else 0.0,
    }
