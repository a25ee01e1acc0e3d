"""Operator session (identity + auth token) with durable token storage."""

from __future__ import annotations

import logging
from collections.abc import Callable, MutableMapping
from typing import Any, Protocol, cast

import redis.asyncio as redis

from apps.tracking_console import config

logger = logging.getLogger(__name__)


class TokenStorage(Protocol):
    """Durable home of the auth token, keyed by one fixed name."""

    async def load(self) -> str: ...

    async def save(self, token: str) -> None: ...

    async def delete(self) -> None: ...


class MappingTokenStorage:
    """Token storage over any mutable mapping.

    In the app this wraps NiceGUI's ``app.storage.general``, which is written to
    disk and survives restarts. Tests pass a plain dict.
    """

    def __init__(self, mapping: MutableMapping[str, Any], key: str) -> None:
        self._mapping = mapping
        self.key = key

    async def load(self) -> str:
        value = self._mapping.get(self.key)
        return value if isinstance(value, str) else ""

    async def save(self, token: str) -> None:
        self._mapping[self.key] = token

    async def delete(self) -> None:
        self._mapping.pop(self.key, None)


class RedisTokenStorage:
    """Token storage in a single Redis key, with optional expiry."""

    def __init__(
        self,
        redis_url: str,
        key: str,
        ttl_seconds: int = 0,
        redis_client: redis.Redis | None = None,
    ) -> None:
        self.redis = redis_client or _redis_from_url(redis_url, decode_responses=True)
        self.key = key
        self.ttl_seconds = ttl_seconds

    async def load(self) -> str:
        raw = await self.redis.get(self.key)
        if raw is None:
            return ""
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)

    async def save(self, token: str) -> None:
        if self.ttl_seconds > 0:
            await self.redis.setex(self.key, self.ttl_seconds, token)
        else:
            await self.redis.set(self.key, token)

    async def delete(self) -> None:
        await self.redis.delete(self.key)

    async def close(self) -> None:
        await self.redis.close()


class SessionStore:
    """Current operator identity and auth token.

    Writers: ``set_session`` (login success) and ``clear`` (logout or any 401).
    Readers use ``get_token``. One logical session per process; last writer wins.
    The token is persisted; the identity lives in memory only and is empty after
    ``restore``.
    """

    def __init__(self, storage: TokenStorage) -> None:
        self.storage = storage
        self._identity = ""
        self._token = ""

    @property
    def identity(self) -> str:
        return self._identity

    def get_token(self) -> str:
        return self._token

    def is_authenticated(self) -> bool:
        return bool(self._token)

    async def restore(self) -> str:
        """Load the persisted token into memory. Returns it (empty if none)."""
        self._token = await self.storage.load()
        logger.info("session_restored", extra={"authenticated": bool(self._token)})
        return self._token

    async def set_session(self, identity: str, token: str) -> None:
        if not token:
            raise ValueError("token must be non-empty")
        await self.storage.save(token)
        self._identity = identity
        self._token = token
        logger.info("session_started", extra={"identity": identity})

    async def clear(self) -> None:
        had_token = bool(self._token)
        self._identity = ""
        self._token = ""
        await self.storage.delete()
        if had_token:
            logger.info("session_cleared")


_session_store: SessionStore | None = None


def build_token_storage() -> TokenStorage:
    """Create the token storage selected by ``TOKEN_STORAGE_BACKEND``."""
    if config.TOKEN_STORAGE_BACKEND == "redis":
        return RedisTokenStorage(
            redis_url=config.REDIS_URL,
            key=config.TOKEN_STORAGE_KEY,
            ttl_seconds=config.TOKEN_TTL_SECONDS,
        )
    from nicegui import app

    return MappingTokenStorage(app.storage.general, config.TOKEN_STORAGE_KEY)


def get_session_store(storage: TokenStorage | None = None) -> SessionStore:
    """Return the process-wide session store, creating it on first use."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore(storage or build_token_storage())
    return _session_store


def _redis_from_url(url: str, *, decode_responses: bool) -> redis.Redis:
    from_url = cast(Callable[..., redis.Redis], redis.Redis.from_url)
    return from_url(url, decode_responses=decode_responses)


__all__ = [
    "MappingTokenStorage",
    "RedisTokenStorage",
    "SessionStore",
    "TokenStorage",
    "build_token_storage",
    "get_session_store",
]
