"""
Application configuration management using Pydantic Settings.
"""
from functools import lru_cache
from typing import Annotated, Any, Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from oauthflow.domain.schemas.oauth import HandlerDescriptor, ProviderSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    APP_NAME: str = "OAuthFlow"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = Field(
        default="development",
        pattern="^(development|staging|production|testing)$",
    )

    # URLs
    BASE_URL: str = "http://localhost:8000/"
    ALLOWED_HOSTS: Annotated[List[str], NoDecode] = Field(default_factory=list)

    # OAuth
    OAUTH_URL_SEGMENT: str = "oauth2"
    OAUTH_PROVIDERS: Dict[str, ProviderSettings] = Field(default_factory=dict)
    OAUTH_TOKEN_HANDLERS: List[HandlerDescriptor] = Field(default_factory=list)

    # Session
    SESSION_BACKEND: str = Field(default="memory", pattern="^(memory|redis)$")
    SESSION_COOKIE_NAME: str = "oauthflow_session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_TTL_SECONDS: int = 3600

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50

    # Sentry
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    @field_validator("BASE_URL", mode="after")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        return v if v.endswith("/") else f"{v}/"

    @field_validator("OAUTH_URL_SEGMENT", mode="after")
    @classmethod
    def strip_segment(cls, v: str) -> str:
        return v.strip("/")

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def assemble_allowed_hosts(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            return [i.strip().lower() for i in v.split(",") if i.strip()]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()
