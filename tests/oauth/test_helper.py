"""
Tests for login link building and the callback bounce page.
"""
from urllib.parse import parse_qsl, urlsplit

from oauthflow.services.oauth import AuthFlowController, build_authorization_url
from oauthflow.services.oauth.templates import render_redirect_page
from tests.fixtures.oauth import make_request, make_settings


class TestBuildAuthorizationUrl:

    def test_full_link(self):
        url = build_authorization_url(
            make_settings(),
            "github",
            context="login",
            scopes=["repo", "gist"],
            back_url="/projects/7",
        )

        parts = urlsplit(url)
        assert parts.path == "/oauth2/authenticate"
        assert parse_qsl(parts.query, keep_blank_values=True) == [
            ("provider", "github"),
            ("context", "login"),
            ("scope[]", "repo"),
            ("scope[]", "gist"),
            ("BackURL", "/projects/7"),
        ]

    def test_without_scopes_requests_defaults(self):
        url = build_authorization_url(make_settings(OAUTH_URL_SEGMENT="/login/"), "google")

        parts = urlsplit(url)
        assert parts.path == "/login/authenticate"
        assert parse_qsl(parts.query, keep_blank_values=True) == [("provider", "google"), ("scope[]", "")]

    def test_link_is_understood_by_the_controller(self):
        url = build_authorization_url(make_settings(), "github", scopes=["repo"])
        parts = urlsplit(url)

        request = make_request(path=parts.path, query=parse_qsl(parts.query, keep_blank_values=True))

        assert AuthFlowController.parse_scope(request.query_params) == ["repo"]


class TestParseScope:

    def test_scope_forms(self):
        def parse(query):
            return AuthFlowController.parse_scope(make_request(query=query).query_params)

        assert parse([("scope[]", "")]) == []
        assert parse([("scope[]", "a"), ("scope[]", "b")]) == ["a", "b"]
        assert parse([("scope[0]", "a"), ("scope[1]", "b")]) == ["a", "b"]
        assert parse([("scope", "a")]) is None
        assert parse([]) is None


class TestRedirectPage:

    def test_escapes_url(self):
        html = render_redirect_page('/oauth2/callback?code=a"b&state=</script><script>x')

        assert "</script><script>x" not in html
        assert "&quot;" in html
        assert "\\u003c/script\\u003e" in html
