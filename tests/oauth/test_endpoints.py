"""
End-to-end tests for the login flow endpoints.

Drives the FastAPI application through httpx with a mock provider, so the
session cookie, routing and error handlers are exercised as in production.
"""
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
import pytest_asyncio
from starlette.responses import PlainTextResponse

from oauthflow.main import create_app
from oauthflow.services.oauth import MemorySessionBackend, ProviderFactory, default_registry
from tests.fixtures.oauth import make_settings
from tests.mocks.oauth_providers import MockOAuthProvider, RecordingTokenHandler

COOKIE_NAME = "oauthflow_session"


def build_client(settings, provider: MockOAuthProvider, backend: MemorySessionBackend, registry=None):
    providers = ProviderFactory(settings)
    providers.register(provider.name, provider)
    app = create_app(
        settings=settings,
        providers=providers,
        handlers=registry or default_registry(),
        session_backend=backend,
    )
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


@pytest.fixture
def backend() -> MemorySessionBackend:
    return MemorySessionBackend()


@pytest_asyncio.fixture
async def client(provider, backend):
    async with build_client(make_settings(), provider, backend) as c:
        yield c


async def start_flow(client: httpx.AsyncClient, **params) -> httpx.Response:
    query = {"provider": "github", "scope[]": "", **params}
    return await client.get("/oauth2/authenticate", params=query)


class TestAuthenticateEndpoint:

    @pytest.mark.asyncio
    async def test_redirects_and_issues_session_cookie(self, client, provider, backend):
        """Test authenticate answers with a redirect to the provider."""
        response = await start_flow(client)

        assert response.status_code == 302
        location = urlsplit(response.headers["location"])
        assert location.netloc == "github.example.com"
        assert parse_qs(location.query)["state"] == [provider.get_state()]
        assert COOKIE_NAME in response.cookies
        assert "X-Request-ID" in response.headers
        assert len(backend) == 1

    @pytest.mark.asyncio
    async def test_existing_cookie_is_reused(self, client):
        await start_flow(client)
        response = await start_flow(client)

        assert COOKIE_NAME not in response.cookies

    @pytest.mark.asyncio
    async def test_missing_provider_is_not_found(self, client, backend):
        response = await client.get("/oauth2/authenticate", params={"scope[]": ""})

        assert response.status_code == 404
        assert len(backend) == 0

    @pytest.mark.asyncio
    async def test_unknown_provider_is_not_found(self, client, backend):
        response = await start_flow(client, provider="nope")

        assert response.status_code == 404
        assert len(backend) == 0


class TestCallbackEndpoint:

    @pytest.mark.asyncio
    async def test_full_login_round_trip(self, client, provider, backend):
        """Test authenticate followed by the provider's return."""
        await start_flow(client, BackURL="/projects/7")

        response = await client.get(
            "/oauth2/callback",
            params={"code": "good", "state": provider.get_state()},
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/projects/7"
        assert provider.last_call_data["get_access_token"]["code"] == "good"
        assert len(backend) == 0

    @pytest.mark.asyncio
    async def test_posted_code_is_relayed(self, client, provider, backend):
        await start_flow(client)

        response = await client.post(
            "/oauth2/callback",
            data={"code": "good", "state": provider.get_state()},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert f"/oauth2/callback?code=good&amp;state={provider.get_state()}" in response.text
        assert len(backend) == 1

    @pytest.mark.asyncio
    async def test_invalid_state(self, client, backend):
        await start_flow(client)

        response = await client.get("/oauth2/callback", params={"code": "good", "state": "forged"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid session state."}
        assert len(backend) == 0

    @pytest.mark.asyncio
    async def test_callback_without_flow(self, client):
        response = await client.get("/oauth2/callback", params={"code": "good", "state": "anything"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_rejected_code(self, client, provider, backend):
        await start_flow(client)

        response = await client.get(
            "/oauth2/callback",
            params={"code": "expired_code", "state": provider.get_state()},
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid access token."}
        assert len(backend) == 0

    @pytest.mark.asyncio
    async def test_handler_response_is_returned(self, provider, backend):
        calls = []
        registry = default_registry()
        registry.register(
            "welcome",
            lambda: RecordingTokenHandler("welcome", calls, result=PlainTextResponse("welcome", status_code=201)),
        )
        settings = make_settings(OAUTH_TOKEN_HANDLERS=[{"class": "welcome", "context": "signup"}])

        async with build_client(settings, provider, backend, registry) as client:
            await start_flow(client, context="signup")
            response = await client.get(
                "/oauth2/callback",
                params={"code": "good", "state": provider.get_state()},
            )

        assert response.status_code == 201
        assert response.text == "welcome"
        assert calls == ["welcome"]
        assert len(backend) == 0

    @pytest.mark.asyncio
    async def test_missing_handler_configuration_is_server_error(self, provider, backend):
        settings = make_settings(OAUTH_TOKEN_HANDLERS=[])

        async with build_client(settings, provider, backend) as client:
            await start_flow(client)
            response = await client.get(
                "/oauth2/callback",
                params={"code": "good", "state": provider.get_state()},
            )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "SYS_004"
        assert len(backend) == 0
