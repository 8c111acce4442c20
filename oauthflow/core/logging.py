"""
Structured logging configuration using structlog.
"""
import logging
import sys
from typing import Any, Dict, Optional

import structlog

from oauthflow.core.config import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structured logging for the application.
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.DEBUG else logging.INFO

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    # Processors for development
    dev_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ]

    # Processors for production
    prod_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]

    processors = dev_processors if settings.is_development else prod_processors

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (usually __name__ of the module)

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)


def log_request_details(
    request_id: str,
    method: str,
    path: str,
    client_ip: str | None = None,
) -> Dict[str, Any]:
    """
    Create a context dict for request logging.
    """
    context = {
        "request_id": request_id,
        "method": method,
        "path": path,
    }

    if client_ip:
        context["client_ip"] = client_ip

    return context


def log_error_details(error: Exception, **kwargs: Any) -> Dict[str, Any]:
    """
    Create a context dict for error logging.

    Args:
        error: Exception instance
        **kwargs: Additional context

    Returns:
        Context dictionary for logging
    """
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **kwargs,
    }


def truncate_state(state: Optional[str]) -> Optional[str]:
    """Shorten a CSRF state token for logging."""
    return state[:8] if state else None
