"""
HTTP middleware: request ids and the session cookie.
"""
import secrets
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp
from structlog.contextvars import bind_contextvars, clear_contextvars

from oauthflow.core.logging import get_logger, log_request_details

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the logging context and log request timing."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))
        start_time = time.time()

        clear_contextvars()
        bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            **log_request_details(
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                client_ip=request.client.host if request.client else None,
            ),
        )

        response = await call_next(request)

        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        response.headers["X-Request-ID"] = request_id
        return response


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """
    Give every browser an opaque session id.

    The id is exposed as ``request.state.session_id``; a cookie is only set
    when the browser did not send a usable one.
    """

    def __init__(
        self,
        app: ASGIApp,
        cookie_name: str = "oauthflow_session",
        max_age: int = 3600,
        secure: bool = False,
    ):
        super().__init__(app)
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        session_id = request.cookies.get(self.cookie_name)
        issued = False
        if not session_id or len(session_id) < 32:
            session_id = secrets.token_urlsafe(32)
            issued = True

        request.state.session_id = session_id
        response = await call_next(request)

        if issued:
            response.set_cookie(
                self.cookie_name,
                session_id,
                max_age=self.max_age,
                httponly=True,
                secure=self.secure,
                samesite="lax",
            )
        return response
