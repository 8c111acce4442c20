"""
Custom exceptions for the application.
"""
from typing import Any, Dict, Optional


class OAuthFlowException(Exception):
    """Base exception for all OAuthFlow exceptions."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(OAuthFlowException):
    """
    The application is misconfigured.

    Never converted into a per-request response by the login flow; it is
    left to the application's generic error handling.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)


class UnknownProviderError(ConfigurationError, LookupError):
    """No OAuth client is configured under the requested name."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"No OAuth provider configured with name '{provider}'",
            details={"provider": provider},
        )
