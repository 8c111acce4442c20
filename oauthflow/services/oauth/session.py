"""
OAuth session storage.

Holds the in-flight authorization for one browser session. Backends store
opaque JSON documents keyed by session id; ``SessionStore`` narrows that to
the ``OAuthSession`` shape.
"""
import json
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import structlog
from pydantic import ValidationError
from redis.exceptions import RedisError

from oauthflow.domain.schemas.oauth import OAuthSession
from oauthflow.infrastructure.cache import get_redis_client

logger = structlog.get_logger(__name__)


class SessionBackend(ABC):
    """Key-value storage for per-session OAuth data."""

    @abstractmethod
    async def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored document, or None."""

    @abstractmethod
    async def save(self, session_id: str, data: Dict[str, Any], ttl: int) -> None:
        """Replace the stored document."""

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Remove the stored document. Removing a missing one is not an error."""


class MemorySessionBackend(SessionBackend):
    """Process-local backend for development and tests."""

    def __init__(self):
        self._data: Dict[str, Tuple[float, str]] = {}

    async def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        entry = self._data.get(session_id)
        if entry is None:
            return None

        expires_at, payload = entry
        if time.monotonic() > expires_at:
            del self._data[session_id]
            return None

        return json.loads(payload)

    async def save(self, session_id: str, data: Dict[str, Any], ttl: int) -> None:
        now = time.monotonic()
        self._purge_expired(now)
        self._data[session_id] = (now + ttl, json.dumps(data))

    async def delete(self, session_id: str) -> None:
        self._data.pop(session_id, None)

    def _purge_expired(self, now: float) -> None:
        """Drop entries of sessions that never came back."""
        expired = [sid for sid, (expires_at, _) in self._data.items() if now > expires_at]
        for sid in expired:
            del self._data[sid]

    def __len__(self) -> int:
        return len(self._data)


class RedisSessionBackend(SessionBackend):
    """Redis backend; documents expire with the key TTL."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        max_connections: Optional[int] = None,
        prefix: str = "oauthflow:session",
    ):
        self.redis_url = redis_url
        self.max_connections = max_connections
        self.prefix = prefix

    async def _client(self):
        return await get_redis_client(self.redis_url, self.max_connections)

    def _make_key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    async def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        try:
            redis = await self._client()
            data = await redis.get(self._make_key(session_id))
        except RedisError as e:
            logger.error("oauth_session_load_error", error=str(e))
            raise

        if not data:
            return None

        try:
            return json.loads(data)
        except json.JSONDecodeError:
            logger.warning("oauth_session_corrupt", session=session_id[:8])
            return None

    async def save(self, session_id: str, data: Dict[str, Any], ttl: int) -> None:
        try:
            redis = await self._client()
            await redis.setex(self._make_key(session_id), ttl, json.dumps(data))
        except RedisError as e:
            logger.error("oauth_session_store_error", error=str(e))
            raise

    async def delete(self, session_id: str) -> None:
        try:
            redis = await self._client()
            await redis.delete(self._make_key(session_id))
        except RedisError as e:
            logger.error("oauth_session_delete_error", error=str(e))
            raise


class SessionStore:
    """Typed access to the OAuth record of a single session."""

    def __init__(self, backend: SessionBackend, session_id: str, ttl: int = 3600):
        self.backend = backend
        self.session_id = session_id
        self.ttl = ttl

    async def get(self) -> Optional[OAuthSession]:
        data = await self.backend.load(self.session_id)
        if not data:
            return None

        try:
            return OAuthSession.model_validate(data)
        except ValidationError:
            logger.warning("oauth_session_invalid", session=self.session_id[:8])
            return None

    async def set(self, oauth_session: OAuthSession) -> None:
        """Store ``oauth_session``, replacing whatever was there."""
        await self.backend.save(self.session_id, oauth_session.model_dump(), self.ttl)

    async def clear(self) -> None:
        await self.backend.delete(self.session_id)
