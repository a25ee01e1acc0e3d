"""Tests for SessionStore and its token storage backends."""

from __future__ import annotations

from typing import Any

import pytest
from fakeredis.aioredis import FakeRedis

from apps.tracking_console import config
from apps.tracking_console.core import session_store as session_module
from apps.tracking_console.core.session_store import (
    MappingTokenStorage,
    RedisTokenStorage,
    SessionStore,
    build_token_storage,
)


@pytest.mark.asyncio()
async def test_starts_unauthenticated(session_store: SessionStore) -> None:
    assert session_store.get_token() == ""
    assert session_store.identity == ""
    assert session_store.is_authenticated() is False


@pytest.mark.asyncio()
async def test_set_session_persists_token_and_holds_identity(
    session_store: SessionStore, storage_mapping: dict[str, Any]
) -> None:
    await session_store.set_session("ops@example.com", "tok-1")

    assert session_store.get_token() == "tok-1"
    assert session_store.identity == "ops@example.com"
    assert storage_mapping == {"traccar_token": "tok-1"}


@pytest.mark.asyncio()
async def test_set_session_rejects_empty_token(session_store: SessionStore) -> None:
    with pytest.raises(ValueError):
        await session_store.set_session("ops@example.com", "")

    assert session_store.is_authenticated() is False


@pytest.mark.asyncio()
async def test_clear_erases_memory_and_storage(
    session_store: SessionStore, storage_mapping: dict[str, Any]
) -> None:
    await session_store.set_session("ops@example.com", "tok-1")

    await session_store.clear()

    assert session_store.get_token() == ""
    assert session_store.identity == ""
    assert storage_mapping == {}


@pytest.mark.asyncio()
async def test_clear_when_already_empty_is_harmless(session_store: SessionStore) -> None:
    await session_store.clear()
    assert session_store.is_authenticated() is False


@pytest.mark.asyncio()
async def test_restore_reads_token_but_not_identity() -> None:
    mapping: dict[str, Any] = {"traccar_token": "persisted"}
    store = SessionStore(MappingTokenStorage(mapping, "traccar_token"))

    assert await store.restore() == "persisted"
    assert store.get_token() == "persisted"
    assert store.identity == ""


@pytest.mark.asyncio()
async def test_mapping_storage_ignores_non_string_values() -> None:
    storage = MappingTokenStorage({"traccar_token": 42}, "traccar_token")
    assert await storage.load() == ""


@pytest.mark.asyncio()
async def test_last_writer_wins(session_store: SessionStore) -> None:
    await session_store.set_session("a@example.com", "tok-a")
    await session_store.set_session("b@example.com", "tok-b")

    assert session_store.get_token() == "tok-b"
    assert session_store.identity == "b@example.com"


@pytest.mark.asyncio()
async def test_redis_storage_round_trip() -> None:
    redis_client = FakeRedis(decode_responses=True)
    storage = RedisTokenStorage(
        redis_url="redis://localhost:6379/1", key="traccar_token", redis_client=redis_client
    )
    store = SessionStore(storage)

    await store.set_session("ops@example.com", "tok-r")
    assert await redis_client.get("traccar_token") == "tok-r"
    assert await redis_client.ttl("traccar_token") == -1

    restored = SessionStore(storage)
    assert await restored.restore() == "tok-r"

    await restored.clear()
    assert await redis_client.get("traccar_token") is None


@pytest.mark.asyncio()
async def test_redis_storage_sets_ttl_when_configured() -> None:
    redis_client = FakeRedis(decode_responses=True)
    storage = RedisTokenStorage(
        redis_url="redis://localhost:6379/1",
        key="traccar_token",
        ttl_seconds=60,
        redis_client=redis_client,
    )

    await storage.save("tok-ttl")

    ttl = await redis_client.ttl("traccar_token")
    assert 0 < ttl <= 60


def test_build_token_storage_selects_redis(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "TOKEN_STORAGE_BACKEND", "redis")
    monkeypatch.setattr(config, "TOKEN_STORAGE_KEY", "custom_key")

    storage = build_token_storage()

    assert isinstance(storage, RedisTokenStorage)
    assert storage.key == "custom_key"


def test_get_session_store_is_process_wide(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(session_module, "_session_store", None)
    storage = MappingTokenStorage({}, "traccar_token")

    first = session_module.get_session_store(storage)
    second = session_module.get_session_store()

    assert first is second
    assert first.storage is storage
