"""
Tests for the error catalog.
"""
from oauthflow.core.errors import ErrorCode, ErrorMessages, ErrorResponse


class TestErrorCatalog:

    def test_catalog_holds_only_login_flow_codes(self):
        assert {code.name for code in ErrorCode} == {
            "AUTH_OAUTH_ERROR",
            "AUTH_OAUTH_STATE_MISMATCH",
            "AUTH_OAUTH_INVALID_TOKEN",
            "SYS_INTERNAL_ERROR",
            "SYS_CONFIGURATION_ERROR",
        }

    def test_every_code_has_a_message(self):
        for code in ErrorCode:
            assert ErrorMessages.get(code) != "An error occurred"

    def test_response_texts(self):
        assert ErrorMessages.get(ErrorCode.AUTH_OAUTH_STATE_MISMATCH) == "Invalid session state."
        assert ErrorMessages.get(ErrorCode.AUTH_OAUTH_INVALID_TOKEN) == "Invalid access token."

    def test_error_response_body(self):
        body = ErrorResponse(ErrorCode.SYS_CONFIGURATION_ERROR, "No token handlers were registered").to_dict()

        assert body == {"error": {"code": "SYS_004", "message": "No token handlers were registered"}}
