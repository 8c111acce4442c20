"""
OAuth login flow controller.

Sends the user to an identity provider (``authenticate``), validates the
provider's return (``callback``), exchanges the code for an access token
and passes the token to the token handlers configured for the flow's
context.
"""
import re
from enum import Enum
from typing import Dict, List, Optional
from urllib.parse import urlencode

import structlog
from fastapi import HTTPException, status
from starlette.datastructures import FormData, QueryParams
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse, Response

from oauthflow.core.config import Settings
from oauthflow.core.errors import ErrorCode, ErrorMessages
from oauthflow.core.exceptions import ConfigurationError, UnknownProviderError
from oauthflow.core.logging import log_error_details, truncate_state
from oauthflow.core.urls import is_site_url, join_links
from oauthflow.domain.schemas.oauth import HandlerDescriptor, OAuthSession
from .backurl import find_back_url, get_return_url
from .base import AUTHORIZATION_CODE, IdentityProviderError
from .factory import ProviderFactory
from .handlers import HandlerRegistry, resolve_handlers
from .session import SessionStore
from .templates import render_redirect_page

logger = structlog.get_logger(__name__)

_SCOPE_KEY = re.compile(r"^scope\[\d*\]$")


class StateValidation(str, Enum):
    """Outcome of checking a callback request against the stored session."""
    VALID = "valid"
    INVALID = "invalid"
    NEEDS_REDIRECT = "needs-redirect"


class AuthFlowController:
    """Runs the authorization-code login flow."""

    def __init__(
        self,
        settings: Settings,
        providers: ProviderFactory,
        handlers: HandlerRegistry,
    ):
        self.settings = settings
        self.providers = providers
        self.handlers = handlers

    def link(self, action: Optional[str] = None) -> str:
        """Site-relative link to the controller, or to one of its actions."""
        return join_links("/", self.settings.OAUTH_URL_SEGMENT, action)

    def absolute_link(self, action: Optional[str] = None) -> str:
        return join_links(self.settings.BASE_URL, self.settings.OAUTH_URL_SEGMENT, action)

    def is_site_url(self, url: str) -> bool:
        return is_site_url(url, self.settings.BASE_URL, self.settings.ALLOWED_HOSTS)

    @staticmethod
    def parse_scope(query_params: QueryParams) -> Optional[List[str]]:
        """
        Read the ``scope[]`` sequence from the query string.

        Returns None when the request carries no scope sequence at all (a bare
        ``scope=`` value is not a sequence). Empty items are dropped, so
        ``scope[]=`` yields an empty list.
        """
        keys = [key for key in query_params.keys() if _SCOPE_KEY.match(key)]
        if not keys:
            return None

        scope: List[str] = []
        for key in keys:
            scope.extend(value for value in query_params.getlist(key) if value)
        return scope

    @staticmethod
    async def _form(request: Request) -> FormData:
        if request.method != "POST":
            return FormData()
        return await request.form()

    @staticmethod
    def _form_value(form: FormData, key: str) -> Optional[str]:
        """Text value of a form field; file uploads are ignored."""
        value = form.get(key)
        return value if isinstance(value, str) else None

    async def _request_vars(self, request: Request) -> Dict[str, str]:
        request_vars = dict(request.query_params)
        request_vars.update(
            (key, value) for key, value in (await self._form(request)).items()
            if isinstance(value, str)
        )
        return request_vars

    async def authenticate(self, request: Request, session: SessionStore) -> Response:
        """
        Start a login flow and redirect the user to the provider.

        Raises:
            HTTPException: 404 if the provider is missing or unknown, or the
                scope is not a sequence
        """
        provider_name = request.query_params.get("provider")
        context = request.query_params.get("context") or None
        scope = self.parse_scope(request.query_params)

        # Missing or invalid data means we can't proceed
        if not provider_name or scope is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

        try:
            provider = self.providers.get_provider(provider_name)
        except UnknownProviderError:
            logger.warning("oauth_unknown_provider", provider=provider_name)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

        if not scope:
            scope = provider.get_default_scopes()

        url = provider.get_authorization_url(scope=scope)
        # Read before any await; registered providers are shared between requests
        state = provider.get_state()

        back_url = find_back_url(
            await self._request_vars(request),
            request.headers,
            self.is_site_url,
            self.settings.BASE_URL,
        )

        await session.set(
            OAuthSession(
                state=state,
                provider=provider_name,
                context=context,
                scope=scope,
                backurl=back_url,
            )
        )

        logger.info(
            "oauth_authenticate_redirect",
            provider=provider_name,
            context=context,
            scope=scope,
            state=truncate_state(state),
        )
        return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)

    async def validate_state(self, request: Request, session: SessionStore) -> StateValidation:
        """
        Check the callback's state against the stored session.

        A code and state delivered in the POST body is a relayed response and
        is reported as ``NEEDS_REDIRECT`` without looking at the session. Any
        other mismatch clears the stored session.
        """
        form = await self._form(request)
        if self._form_value(form, "state") and self._form_value(form, "code"):
            return StateValidation.NEEDS_REDIRECT

        state = request.query_params.get("state")
        data = await session.get()

        # If we're lacking any required data, or the session state doesn't match
        # the one the provider returned, the request is invalid
        if (
            data is None
            or not data.state
            or not data.provider
            or not data.scope
            or state != data.state
        ):
            await session.clear()
            return StateValidation.INVALID

        return StateValidation.VALID

    async def callback(self, request: Request, session: SessionStore) -> Response:
        """
        Finish a login flow.

        Raises:
            HTTPException: 400 on state mismatch or a failed exchange / handler
            ConfigurationError: If no token handlers are configured
        """
        validation = await self.validate_state(request, session)

        if validation is StateValidation.NEEDS_REDIRECT:
            form = await self._form(request)
            state = self._form_value(form, "state")
            query = urlencode({"code": self._form_value(form, "code"), "state": state})
            logger.info("oauth_callback_relay", state=truncate_state(state))
            return HTMLResponse(render_redirect_page(f"{request.url.path}?{query}"))

        if validation is StateValidation.INVALID:
            logger.warning(
                "oauth_callback_invalid_state",
                state=truncate_state(request.query_params.get("state")),
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=ErrorMessages.get(ErrorCode.AUTH_OAUTH_STATE_MISMATCH),
            )

        oauth_session = await session.get()
        return_url = get_return_url(oauth_session.backurl, self.is_site_url, self.settings.BASE_URL)

        try:
            provider = self.providers.get_provider(oauth_session.provider)
            token = await provider.get_access_token(
                AUTHORIZATION_CODE,
                code=request.query_params.get("code"),
            )

            # Run handlers to process the token
            results = []
            for descriptor in self.get_handlers_for_context(oauth_session.context):
                handler = self.handlers.create(descriptor.handler)
                results.append(await handler.handle_token(token, provider))

            # Handlers may return response objects
            for result in results:
                if isinstance(result, Response):
                    logger.info(
                        "oauth_handler_response",
                        provider=oauth_session.provider,
                        status_code=result.status_code,
                    )
                    return result

        except IdentityProviderError as e:
            logger.error(
                "oauth_identity_provider_error",
                provider=oauth_session.provider,
                error=e.error,
                description=e.description,
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=ErrorMessages.get(ErrorCode.AUTH_OAUTH_INVALID_TOKEN),
            )
        except UnknownProviderError as e:
            logger.error("oauth_exchange_error", **log_error_details(e))
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
        except (ConfigurationError, HTTPException):
            raise
        except Exception as e:
            logger.error(
                "oauth_exchange_error",
                provider=oauth_session.provider,
                **log_error_details(e),
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e) or ErrorMessages.get(ErrorCode.AUTH_OAUTH_ERROR),
            )
        finally:
            await session.clear()

        logger.info(
            "oauth_callback_complete",
            provider=oauth_session.provider,
            context=oauth_session.context,
            return_url=return_url,
        )
        return RedirectResponse(url=return_url, status_code=status.HTTP_302_FOUND)

    def get_handlers_for_context(self, context: Optional[str] = None) -> List[HandlerDescriptor]:
        """
        Get the token handlers for ``context``, in invocation order.

        Raises:
            ConfigurationError: If no token handlers were registered
        """
        return resolve_handlers(self.settings.OAUTH_TOKEN_HANDLERS, context)
