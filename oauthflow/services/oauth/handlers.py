"""
Token handlers.

A token handler receives the access token obtained at the end of a login
flow and performs application-specific work with it (signing the user in,
storing the token, ...). Handlers are named in configuration by an
identifier and created through a ``HandlerRegistry``.
"""
from abc import ABC, abstractmethod
from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List, Optional

import structlog
from starlette.responses import Response

from oauthflow.core.exceptions import ConfigurationError
from oauthflow.domain.schemas.oauth import GLOBAL_CONTEXT, HandlerDescriptor
from .base import AccessToken, OAuthProviderInterface

logger = structlog.get_logger(__name__)


class TokenHandler(ABC):
    """Processes the access token produced by a successful callback."""

    @abstractmethod
    async def handle_token(
        self,
        token: AccessToken,
        provider: OAuthProviderInterface,
    ) -> Optional[Response]:
        """
        Handle a freshly obtained token.

        Returning a ``Response`` ends the login flow with that response
        instead of the usual redirect back to the return URL.
        """


HandlerFactory = Callable[[], TokenHandler]


class HandlerRegistry:
    """Maps handler identifiers to factories."""

    def __init__(self):
        self._factories: Dict[str, HandlerFactory] = {}

    def register(self, identifier: str, factory: Optional[HandlerFactory] = None):
        """
        Register ``factory`` under ``identifier``.

        Can also be used as a class decorator::

            @registry.register("login")
            class LoginTokenHandler(TokenHandler): ...
        """
        if factory is None:
            def decorator(f: HandlerFactory) -> HandlerFactory:
                self._factories[identifier] = f
                return f
            return decorator

        self._factories[identifier] = factory
        return factory

    def create(self, identifier: str) -> TokenHandler:
        factory = self._factories.get(identifier)
        if factory is None:
            raise ConfigurationError(
                f"Unknown token handler '{identifier}'",
                details={"handler": identifier},
            )
        return factory()

    def identifiers(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._factories


def compare_priority(a: HandlerDescriptor, b: HandlerDescriptor) -> int:
    """
    Order handlers by ascending priority.

    If either handler has no priority the pair compares equal. This is not a
    total order: where prioritised and unprioritised handlers are mixed, the
    relative order of the prioritised ones may depend on input order.
    """
    if a.priority is None or b.priority is None:
        return 0
    if a.priority == b.priority:
        return 0
    return -1 if a.priority < b.priority else 1


def resolve_handlers(
    descriptors: Iterable[HandlerDescriptor],
    context: Optional[str] = None,
) -> List[HandlerDescriptor]:
    """
    Select and order the handlers that apply to ``context``.

    Global ("*") handlers always apply; named ones only for their own context.

    Raises:
        ConfigurationError: If no token handlers are registered at all
    """
    descriptors = list(descriptors)
    if not descriptors:
        raise ConfigurationError("No token handlers were registered")

    allowed = {GLOBAL_CONTEXT}
    if context:
        allowed.add(context)

    eligible = [d for d in descriptors if d.context in allowed]
    return sorted(eligible, key=cmp_to_key(compare_priority))


class LogTokenHandler(TokenHandler):
    """Logs that a token was obtained. Useful as a global audit handler."""

    async def handle_token(
        self,
        token: AccessToken,
        provider: OAuthProviderInterface,
    ) -> Optional[Response]:
        logger.info(
            "oauth_token_received",
            provider=provider.name,
            token_type=token.token_type,
            expires_in=token.expires_in,
            has_refresh_token=bool(token.refresh_token),
        )
        return None


def default_registry() -> HandlerRegistry:
    """Registry preloaded with the built-in handlers."""
    registry = HandlerRegistry()
    registry.register("log", LogTokenHandler)
    return registry
