"""Navigation API - Route guard decisions for the dashboard front end"""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..deps import Identity, get_optional_user_dep
from ...domain.route_access import ROUTE_ACCESS, PUBLIC_ROUTES
from ...engine.route_guard import RouteDecision, get_route_guard

router = APIRouter()


@router.get("/check", response_model=RouteDecision)
async def check_route(
    path: str = Query(..., min_length=1),
    identity: Optional[Identity] = Depends(get_optional_user_dep)
):
    """
    Decide whether the caller may open a page.

    Never fails for an unauthorized caller; the decision carries the redirect.
    """
    return get_route_guard().evaluate(path, identity)


@router.get("/routes")
async def list_routes(identity: Optional[Identity] = Depends(get_optional_user_dep)):
    """The route table, and the routes the caller may open"""
    return {
        "public": sorted(PUBLIC_ROUTES),
        "routes": [
            {"route": route, "roles": sorted(r.value for r in roles)}
            for route, roles in ROUTE_ACCESS
        ],
        "accessible": [
            route for route, roles in ROUTE_ACCESS
            if identity is not None and identity.role in roles
        ],
    }
