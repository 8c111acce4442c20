"""
OAuth2 authorization-code login flow.

Redirects users to an identity provider, validates the callback, exchanges
the code for an access token and dispatches the token to context-scoped
token handlers.
"""

from .base import (
    AUTHORIZATION_CODE,
    AccessToken,
    IdentityProviderError,
    OAuthProviderInterface,
)
from .controller import AuthFlowController, StateValidation
from .factory import ProviderFactory
from .generic import GenericProvider
from .handlers import (
    HandlerRegistry,
    LogTokenHandler,
    TokenHandler,
    default_registry,
    resolve_handlers,
)
from .helper import build_authorization_url
from .session import (
    MemorySessionBackend,
    RedisSessionBackend,
    SessionBackend,
    SessionStore,
)

__all__ = [
    # Provider interface and types
    "AUTHORIZATION_CODE",
    "AccessToken",
    "IdentityProviderError",
    "OAuthProviderInterface",
    "GenericProvider",
    "ProviderFactory",

    # Flow
    "AuthFlowController",
    "StateValidation",
    "build_authorization_url",

    # Token handlers
    "HandlerRegistry",
    "LogTokenHandler",
    "TokenHandler",
    "default_registry",
    "resolve_handlers",

    # Session state
    "MemorySessionBackend",
    "RedisSessionBackend",
    "SessionBackend",
    "SessionStore",
]
