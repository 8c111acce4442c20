"""
Dependency injection for FastAPI.
"""
from fastapi import Request

from oauthflow.core.config import Settings
from oauthflow.services.oauth import AuthFlowController, SessionStore


def get_controller(request: Request) -> AuthFlowController:
    """The application's login flow controller."""
    return request.app.state.controller


def get_session_store(request: Request) -> SessionStore:
    """
    OAuth session storage for the requesting browser.

    Requires ``SessionCookieMiddleware`` to have assigned a session id.
    """
    settings: Settings = request.app.state.settings
    return SessionStore(
        backend=request.app.state.session_backend,
        session_id=request.state.session_id,
        ttl=settings.SESSION_TTL_SECONDS,
    )
