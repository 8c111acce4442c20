"""
Tests for settings parsing.
"""
from oauthflow.core.config import Settings
from oauthflow.domain.schemas.oauth import HandlerDescriptor
from tests.fixtures.oauth import make_settings


class TestSettings:

    def test_values_are_normalised(self):
        settings = make_settings(BASE_URL="https://app.example.com", OAUTH_URL_SEGMENT="/oauth2/")

        assert settings.BASE_URL == "https://app.example.com/"
        assert settings.OAUTH_URL_SEGMENT == "oauth2"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_HOSTS", "Login.example.com, cdn.example.com")
        monkeypatch.setenv(
            "OAUTH_TOKEN_HANDLERS",
            '[{"class": "log"}, {"class": "signin", "context": "login", "priority": 1}]',
        )
        monkeypatch.setenv(
            "OAUTH_PROVIDERS",
            '{"github": {"client_id": "id", "client_secret": "secret",'
            ' "url_authorize": "https://github.com/login/oauth/authorize",'
            ' "url_access_token": "https://github.com/login/oauth/access_token"}}',
        )

        settings = Settings(_env_file=None)

        assert settings.ALLOWED_HOSTS == ["login.example.com", "cdn.example.com"]
        assert settings.OAUTH_TOKEN_HANDLERS == [
            HandlerDescriptor(handler="log"),
            HandlerDescriptor(handler="signin", context="login", priority=1),
        ]
        assert settings.OAUTH_PROVIDERS["github"].scope_separator == " "

    def test_environment_flags(self):
        assert make_settings(ENVIRONMENT="production").is_production
        assert not make_settings().is_development
