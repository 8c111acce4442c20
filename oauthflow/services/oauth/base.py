"""
OAuth Provider Base Interface

Defines the abstract interface that authorization-code providers must implement.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from oauthflow.core.exceptions import OAuthFlowException

AUTHORIZATION_CODE = "authorization_code"


class AccessToken(BaseModel):
    """OAuth token information returned by a code exchange."""
    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    id_token: Optional[str] = None  # For OpenID Connect
    values: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "AccessToken":
        """Build a token from a token endpoint JSON body, keeping unknown fields in ``values``."""
        known = set(cls.model_fields) - {"values"}
        return cls(
            **{k: v for k, v in data.items() if k in known},
            values={k: v for k, v in data.items() if k not in known},
        )

    def __str__(self) -> str:
        return self.access_token


class IdentityProviderError(OAuthFlowException):
    """The identity provider rejected a request (invalid or expired code, bad client, ...)."""

    def __init__(
        self,
        error: str,
        description: Optional[str] = None,
        status_code: int = 400,
        response_body: Any = None,
    ):
        self.error = error
        self.description = description
        self.response_body = response_body
        super().__init__(
            f"{error}: {description}" if description else error,
            status_code=status_code,
        )


class OAuthProviderInterface(ABC):
    """Abstract base class for OAuth providers."""

    name: str = "oauth"

    @abstractmethod
    def get_default_scopes(self) -> List[str]:
        """Scopes requested when the caller does not ask for any."""

    @abstractmethod
    def get_state(self) -> Optional[str]:
        """
        CSRF state generated by the most recent ``get_authorization_url`` call.
        """

    @abstractmethod
    def get_authorization_url(self, scope: Optional[List[str]] = None, **options: Any) -> str:
        """
        Build the provider's authorization URL, generating a fresh state token.

        Args:
            scope: Scopes to request (provider defaults when empty)
            **options: Additional provider-specific query parameters

        Returns:
            Authorization URL
        """

    @abstractmethod
    async def get_access_token(self, grant: str, **params: Any) -> AccessToken:
        """
        Request an access token from the provider.

        Args:
            grant: Grant type, e.g. ``authorization_code``
            **params: Grant parameters (``code`` for the authorization-code grant)

        Returns:
            Access token

        Raises:
            IdentityProviderError: If the provider rejects the request
        """
