"""
Generic authorization-code provider.

Talks to any OAuth2 server that exposes an authorization endpoint and a
token endpoint. Provider-specific behaviour is expressed through settings.
"""
import secrets
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx
import structlog

from oauthflow.domain.schemas.oauth import ProviderSettings
from .base import (
    AUTHORIZATION_CODE,
    AccessToken,
    IdentityProviderError,
    OAuthProviderInterface,
)

logger = structlog.get_logger(__name__)


class GenericProvider(OAuthProviderInterface):
    """OAuth2 client configured entirely from ``ProviderSettings``."""

    def __init__(
        self,
        name: str,
        settings: ProviderSettings,
        redirect_uri: str,
        timeout: float = 30.0,
    ):
        self.name = name
        self.settings = settings
        self.redirect_uri = settings.redirect_uri or redirect_uri
        self.timeout = timeout
        self._state: Optional[str] = None

    def get_default_scopes(self) -> List[str]:
        return list(self.settings.default_scopes)

    def get_state(self) -> Optional[str]:
        return self._state

    def get_authorization_url(self, scope: Optional[List[str]] = None, **options: Any) -> str:
        scope = scope or self.get_default_scopes()
        self._state = options.pop("state", None) or self._generate_state()

        params = {
            "client_id": self.settings.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "state": self._state,
        }
        if scope:
            params["scope"] = self.settings.scope_separator.join(scope)
        params.update(self.settings.authorization_params)
        params.update(options)

        url = f"{self.settings.url_authorize}?{urlencode(params)}"
        logger.info(
            "oauth_authorization_url_generated",
            provider=self.name,
            state=self._state[:8],
        )
        return url

    async def get_access_token(self, grant: str, **params: Any) -> AccessToken:
        if grant != AUTHORIZATION_CODE:
            raise ValueError(f"Unsupported grant type: {grant}")

        token_data = {
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "grant_type": grant,
            "redirect_uri": self.redirect_uri,
            **params,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.settings.url_access_token,
                data=token_data,
                headers={"Accept": "application/json"},
            )

        body = self._parse_body(response)

        if response.status_code >= 400 or "error" in body:
            error = body.get("error") or f"http_{response.status_code}"
            description = body.get("error_description")
            logger.error(
                "oauth_token_exchange_rejected",
                provider=self.name,
                status=response.status_code,
                error=error,
                description=description,
            )
            raise IdentityProviderError(
                error,
                description,
                status_code=response.status_code,
                response_body=body or response.text,
            )

        if "access_token" not in body:
            raise IdentityProviderError(
                "invalid_response",
                "Token response did not include an access token",
                status_code=response.status_code,
                response_body=body,
            )

        token = AccessToken.from_response(body)
        logger.info(
            "oauth_tokens_obtained",
            provider=self.name,
            has_refresh_token=bool(token.refresh_token),
            expires_in=token.expires_in,
        )
        return token

    @staticmethod
    def _parse_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _generate_state() -> str:
        return secrets.token_urlsafe(32)
