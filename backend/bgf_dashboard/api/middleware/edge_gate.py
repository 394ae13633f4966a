"""
Edge Gate Middleware

Inspects the staff cookie before routing. The cookie is fully verified, but
the gate never blocks: protected endpoints enforce authentication through
their own dependencies. The outcome is logged and left on request.state.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ...config.settings import settings
from ...domain.errors import AuthenticationError
from ...utils.jwt import get_token_service
from ...utils.logger import get_logger

logger = get_logger(__name__)


class EdgeGateMiddleware(BaseHTTPMiddleware):
    """Annotates requests with request.state.edge_identity / edge_error"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.edge_identity = None
        request.state.edge_error = None

        token = request.cookies.get(settings.staff_token_cookie)
        if token:
            try:
                identity = get_token_service().verify_staff_token(token)
                request.state.edge_identity = identity
                logger.debug(
                    f"Edge gate: staff cookie for {identity.name}",
                    extra={"path": request.url.path, "role": identity.role.value}
                )
            except AuthenticationError as e:
                request.state.edge_error = e.error_code
                logger.warning(
                    f"Edge gate: staff cookie rejected ({e.message})",
                    extra={"path": request.url.path, "error_code": e.error_code}
                )

        return await call_next(request)
