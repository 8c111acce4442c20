"""
Shared fixtures for the OAuth login flow tests.
"""
from typing import List

import pytest

from oauthflow.core.config import Settings
from oauthflow.services.oauth import (
    AuthFlowController,
    HandlerRegistry,
    MemorySessionBackend,
    ProviderFactory,
    SessionStore,
    default_registry,
)
from tests.fixtures.oauth import SESSION_ID, make_settings
from tests.mocks.oauth_providers import MockOAuthProvider


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def provider() -> MockOAuthProvider:
    return MockOAuthProvider("github", default_scopes=["read:user", "user:email"])


@pytest.fixture
def provider_factory(settings: Settings, provider: MockOAuthProvider) -> ProviderFactory:
    factory = ProviderFactory(settings)
    factory.register("github", provider)
    return factory


@pytest.fixture
def registry() -> HandlerRegistry:
    return default_registry()


@pytest.fixture
def controller(
    settings: Settings,
    provider_factory: ProviderFactory,
    registry: HandlerRegistry,
) -> AuthFlowController:
    return AuthFlowController(settings, provider_factory, registry)


@pytest.fixture
def session_backend() -> MemorySessionBackend:
    return MemorySessionBackend()


@pytest.fixture
def session(session_backend: MemorySessionBackend) -> SessionStore:
    return SessionStore(session_backend, SESSION_ID, ttl=600)


@pytest.fixture
def handler_calls() -> List[str]:
    return []
