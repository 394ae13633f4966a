"""Route Guard - Navigation decisions for dashboard pages"""
from typing import Optional, Union
from pydantic import BaseModel

from ..domain.models import RegularUserIdentity, StaffIdentity
from ..domain.route_access import has_route_access, is_public_route
from ..utils.logger import get_logger

logger = get_logger(__name__)

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"


class RouteDecision(BaseModel):
    """Outcome of a navigation check. Denials are redirects, never errors."""
    allowed: bool
    redirect_to: Optional[str] = None
    reason: str


def normalize_path(pathname: str) -> str:
    """Drop query string, fragment and trailing slash"""
    path = pathname.split("?", 1)[0].split("#", 1)[0] or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


class RouteGuard:
    """
    Decide whether an identity may open a dashboard page

    - Public pages are always allowed
    - Without an identity, redirect to the login page
    - With an identity whose role is not permitted, redirect to the dashboard
    """

    def evaluate(
        self,
        pathname: str,
        identity: Optional[Union[RegularUserIdentity, StaffIdentity]] = None
    ) -> RouteDecision:
        path = normalize_path(pathname)

        if is_public_route(path):
            return RouteDecision(allowed=True, reason="public")

        if identity is None:
            return RouteDecision(allowed=False, redirect_to=LOGIN_PATH, reason="unauthenticated")

        if not has_route_access(path, identity.role):
            logger.info(
                f"Navigation to {path} denied",
                extra={"path": path, "role": identity.role.value, "user_id": identity.id}
            )
            return RouteDecision(allowed=False, redirect_to=DASHBOARD_PATH, reason="forbidden")

        return RouteDecision(allowed=True, reason="authorized")


_route_guard: Optional[RouteGuard] = None


def get_route_guard() -> RouteGuard:
    """Get global route guard instance"""
    global _route_guard
    if _route_guard is None:
        _route_guard = RouteGuard()
    return _route_guard
