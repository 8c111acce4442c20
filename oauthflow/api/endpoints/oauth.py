"""
OAuth login endpoints.

Mounted under the configured URL segment (``/oauth2`` by default).
"""
from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from oauthflow.api.dependencies import get_controller, get_session_store
from oauthflow.services.oauth import AuthFlowController, SessionStore

router = APIRouter()


@router.api_route("/authenticate", methods=["GET", "POST"])
async def authenticate(
    request: Request,
    controller: AuthFlowController = Depends(get_controller),
    session: SessionStore = Depends(get_session_store),
) -> Response:
    """
    Start a login flow.

    Query parameters: ``provider`` (required), ``context`` (optional) and a
    ``scope[]`` sequence (may be empty). Responds with a redirect to the
    provider's authorization page.
    """
    return await controller.authenticate(request, session)


@router.api_route("/callback", methods=["GET", "POST"])
async def callback(
    request: Request,
    controller: AuthFlowController = Depends(get_controller),
    session: SessionStore = Depends(get_session_store),
) -> Response:
    """
    Provider return endpoint.

    Expects ``code`` and ``state`` as query parameters. When they arrive in a
    POST body instead, a page is returned that repeats the request as a GET.
    """
    return await controller.callback(request, session)
