"""
Error message catalog for the OAuth login flow.

Keeps the response texts in one place so endpoints and tests agree on them.
"""
from enum import Enum
from typing import Dict


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Authentication Errors (AUTH_*)
    AUTH_OAUTH_ERROR = "AUTH_014"
    AUTH_OAUTH_STATE_MISMATCH = "AUTH_015"
    AUTH_OAUTH_INVALID_TOKEN = "AUTH_016"

    # System Errors (SYS_*)
    SYS_INTERNAL_ERROR = "SYS_001"
    SYS_CONFIGURATION_ERROR = "SYS_004"


class ErrorMessages:
    """Centralized error message definitions."""

    _messages: Dict[ErrorCode, str] = {
        ErrorCode.AUTH_OAUTH_ERROR: "OAuth authentication failed.",
        ErrorCode.AUTH_OAUTH_STATE_MISMATCH: "Invalid session state.",
        ErrorCode.AUTH_OAUTH_INVALID_TOKEN: "Invalid access token.",
        ErrorCode.SYS_INTERNAL_ERROR: "An internal error occurred. Please try again later",
        ErrorCode.SYS_CONFIGURATION_ERROR: "System configuration error",
    }

    @classmethod
    def get(cls, code: ErrorCode, **kwargs) -> str:
        """
        Get error message for a given error code.

        Args:
            code: Error code
            **kwargs: Additional context for formatting

        Returns:
            Formatted error message
        """
        base_message = cls._messages.get(code, "An error occurred")

        if kwargs:
            try:
                return base_message.format(**kwargs)
            except KeyError:
                return base_message

        return base_message


class ErrorResponse:
    """Standardized error response structure."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or ErrorMessages.get(code)

    def to_dict(self) -> Dict:
        """Convert to dictionary for API response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
