"""
OAuth login flow schemas.

Configuration shapes for providers and token handlers, plus the
per-session record that tracks an in-flight authorization.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

GLOBAL_CONTEXT = "*"


class ProviderSettings(BaseModel):
    """Client configuration for one authorization-code provider."""
    client_id: str
    client_secret: str
    url_authorize: str
    url_access_token: str
    redirect_uri: Optional[str] = None  # Defaults to the absolute callback link
    default_scopes: List[str] = Field(default_factory=list)
    scope_separator: str = " "
    authorization_params: Dict[str, str] = Field(default_factory=dict)


class HandlerDescriptor(BaseModel):
    """
    A token handler entry from static configuration.

    ``handler`` names a factory in the handler registry; ``context`` selects
    the login flows the handler applies to ("*" applies to all of them).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    handler: str = Field(..., alias="class")
    context: str = GLOBAL_CONTEXT
    priority: Optional[int] = None


class OAuthSession(BaseModel):
    """
    In-flight authorization stored against the user's session.

    Written as one unit by ``authenticate`` and removed by ``callback``.
    """
    state: str
    provider: str
    context: Optional[str] = None
    scope: List[str] = Field(default_factory=list)
    backurl: str

    @field_validator("scope", mode="before")
    @classmethod
    def coerce_scope(cls, v: Any) -> List[str]:
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v]
        return v
