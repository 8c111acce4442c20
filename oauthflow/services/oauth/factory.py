"""
Provider factory: resolves provider names to configured OAuth clients.
"""
from typing import Dict, List

import structlog

from oauthflow.core.config import Settings
from oauthflow.core.exceptions import UnknownProviderError
from oauthflow.core.urls import join_links
from .base import OAuthProviderInterface
from .generic import GenericProvider

logger = structlog.get_logger(__name__)


class ProviderFactory:
    """Builds provider clients from settings, or hands out registered ones."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._registered: Dict[str, OAuthProviderInterface] = {}

    def register(self, name: str, provider: OAuthProviderInterface) -> None:
        """Install a host-supplied client under ``name``."""
        self._registered[name] = provider
        logger.info("oauth_provider_registered", provider=name)

    def names(self) -> List[str]:
        return sorted(set(self._registered) | set(self.settings.OAUTH_PROVIDERS))

    def get_provider(self, name: str) -> OAuthProviderInterface:
        """
        Get the client for ``name``.

        Configured providers are built per call, so state generated for one
        request never leaks into another.

        Raises:
            UnknownProviderError: If nothing is configured under ``name``
        """
        if name in self._registered:
            return self._registered[name]

        provider_settings = self.settings.OAUTH_PROVIDERS.get(name)
        if provider_settings is None:
            raise UnknownProviderError(name)

        return GenericProvider(
            name=name,
            settings=provider_settings,
            redirect_uri=self.callback_url(),
        )

    def callback_url(self) -> str:
        return join_links(self.settings.BASE_URL, self.settings.OAUTH_URL_SEGMENT, "callback")
