"""
OAuthFlow - application entry point.
"""
from contextlib import asynccontextmanager
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from oauthflow.api.middleware import RequestContextMiddleware, SessionCookieMiddleware
from oauthflow.api.router import build_api_router
from oauthflow.core.config import Settings, get_settings
from oauthflow.core.errors import ErrorCode, ErrorResponse
from oauthflow.core.exceptions import ConfigurationError, OAuthFlowException
from oauthflow.core.logging import get_logger, log_error_details, setup_logging
from oauthflow.infrastructure.cache import close_redis_pool
from oauthflow.services.oauth import (
    AuthFlowController,
    HandlerRegistry,
    MemorySessionBackend,
    ProviderFactory,
    RedisSessionBackend,
    SessionBackend,
    default_registry,
)

logger = get_logger(__name__)


def build_session_backend(settings: Settings) -> SessionBackend:
    if settings.SESSION_BACKEND == "redis":
        return RedisSessionBackend(
            redis_url=settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
        )
    return MemorySessionBackend()


def create_app(
    settings: Optional[Settings] = None,
    providers: Optional[ProviderFactory] = None,
    handlers: Optional[HandlerRegistry] = None,
    session_backend: Optional[SessionBackend] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use instead of the environment
        providers: Provider factory, e.g. with host-registered clients
        handlers: Token handler registry
        session_backend: Storage for in-flight OAuth sessions
    """
    settings = settings or get_settings()
    setup_logging(settings)

    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        )

    providers = providers or ProviderFactory(settings)
    handlers = handlers or default_registry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting OAuthFlow",
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
            providers=providers.names(),
            handlers=[d.handler for d in settings.OAUTH_TOKEN_HANDLERS],
        )
        if not settings.OAUTH_TOKEN_HANDLERS:
            logger.warning("oauth_no_token_handlers")

        yield

        logger.info("Shutting down OAuthFlow")
        if settings.SESSION_BACKEND == "redis":
            await close_redis_pool()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.session_backend = (
        session_backend if session_backend is not None else build_session_backend(settings)
    )
    app.state.controller = AuthFlowController(settings, providers, handlers)

    app.add_middleware(
        SessionCookieMiddleware,
        cookie_name=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_TTL_SECONDS,
        secure=settings.SESSION_COOKIE_SECURE,
    )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(OAuthFlowException)
    async def oauthflow_exception_handler(request: Request, exc: OAuthFlowException):
        """Application errors that escaped the request handlers."""
        logger.error(
            "oauthflow_exception",
            path=request.url.path,
            **log_error_details(exc),
        )
        code = (
            ErrorCode.SYS_CONFIGURATION_ERROR
            if isinstance(exc, ConfigurationError)
            else ErrorCode.SYS_INTERNAL_ERROR
        )
        message = None if settings.is_production else exc.message
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(code, message).to_dict(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method,
        )

        # Don't expose internal errors in production
        if settings.is_production:
            return JSONResponse(
                status_code=500,
                content={"detail": "An internal error occurred"},
            )

        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)},
        )

    app.include_router(build_api_router(settings.OAUTH_URL_SEGMENT))
    return app


app = create_app()
