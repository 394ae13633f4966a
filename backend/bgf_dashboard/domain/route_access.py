"""Route Access - Static route to allowed-roles table

The table is compiled once at import. Lookup tries an exact path match first,
then the ``:param`` patterns in declaration order; the first match wins.
"""
import re
from typing import FrozenSet, List, Optional, Pattern, Tuple, Union

from .enums import UserRole

ALL_ROLES: FrozenSet[UserRole] = frozenset(UserRole)
STAFF_ONLY: FrozenSet[UserRole] = frozenset(r for r in UserRole if r != UserRole.USER)
USER_MANAGERS: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS})
REPORT_VIEWERS: FrozenSet[UserRole] = frozenset({
    UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS, UserRole.DIRECTOR, UserRole.CEO, UserRole.PATRON,
})
ADMIN_AREA: FrozenSet[UserRole] = frozenset({
    UserRole.ADMIN, UserRole.HEAD_OF_PROGRAMS, UserRole.DIRECTOR,
})
ACTIVITY_LOG_VIEWERS: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.DIRECTOR})
ADMIN_ONLY: FrozenSet[UserRole] = frozenset({UserRole.ADMIN})

# Declaration order matters for pattern routes
ROUTE_ACCESS: Tuple[Tuple[str, FrozenSet[UserRole]], ...] = (
    ("/dashboard", ALL_ROLES),
    ("/requests", ALL_ROLES),
    ("/requests/new", ALL_ROLES),
    ("/requests/:id", ALL_ROLES),
    ("/notifications", ALL_ROLES),
    ("/notifications/preferences", ALL_ROLES),
    ("/profile", ALL_ROLES),

    ("/approvals", STAFF_ONLY),
    ("/approvals/:id", STAFF_ONLY),

    ("/users", USER_MANAGERS),
    ("/users/new", USER_MANAGERS),
    ("/users/:id", USER_MANAGERS),

    ("/reports", REPORT_VIEWERS),

    ("/admin", ADMIN_AREA),
    ("/admin/users", USER_MANAGERS),
    ("/admin/users/new", USER_MANAGERS),
    ("/admin/users/:id", USER_MANAGERS),
    ("/admin/activity-logs", ACTIVITY_LOG_VIEWERS),
    ("/admin/settings", ADMIN_ONLY),

    ("/settings", ADMIN_ONLY),
)

PUBLIC_ROUTES: FrozenSet[str] = frozenset({
    "/login",
    "/staff-login",
    "/login-guide",
    "/forgot-password",
    "/reset-password",
    "/",
    "/register",
})

_PARAM = re.compile(r":[A-Za-z_][A-Za-z0-9_]*")


def _compile(route: str) -> Pattern[str]:
    parts = _PARAM.split(route)
    return re.compile("^" + "[^/]+".join(re.escape(p) for p in parts) + "$")


_EXACT = {route: roles for route, roles in ROUTE_ACCESS if ":" not in route}
_PATTERNS: List[Tuple[str, Pattern[str], FrozenSet[UserRole]]] = [
    (route, _compile(route), roles) for route, roles in ROUTE_ACCESS if ":" in route
]


def is_public_route(pathname: str) -> bool:
    return pathname in PUBLIC_ROUTES


def match_route(pathname: str) -> Optional[Tuple[str, FrozenSet[UserRole]]]:
    """Return (route, allowed roles) for the first matching table entry"""
    if pathname in _EXACT:
        return pathname, _EXACT[pathname]
    for route, pattern, roles in _PATTERNS:
        if pattern.match(pathname):
            return route, roles
    return None


def has_route_access(pathname: str, role: Optional[Union[UserRole, str]]) -> bool:
    """
    Check whether a role may open a path.

    Unknown paths and missing or unknown roles are denied.
    """
    if not role:
        return False
    try:
        role = UserRole(role)
    except ValueError:
        return False

    matched = match_route(pathname)
    if matched is None:
        return False
    return role in matched[1]
