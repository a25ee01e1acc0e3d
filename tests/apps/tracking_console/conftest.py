"""Shared fixtures for tracking_console tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest

from apps.tracking_console import config
from apps.tracking_console.core.client import AsyncTrackingClient
from apps.tracking_console.core.resources import TrackingResources
from apps.tracking_console.core.session_store import MappingTokenStorage, SessionStore

API = "http://testserver/api"


@pytest.fixture()
def storage_mapping() -> dict[str, Any]:
    return {}


@pytest.fixture()
def session_store(storage_mapping: dict[str, Any]) -> SessionStore:
    return SessionStore(MappingTokenStorage(storage_mapping, "traccar_token"))


@pytest.fixture()
async def tracking_client(
    monkeypatch: pytest.MonkeyPatch, session_store: SessionStore
) -> AsyncIterator[AsyncTrackingClient]:
    monkeypatch.setattr(config, "TRACCAR_API_URL", API)
    client = AsyncTrackingClient(session_store=session_store)
    await client.startup()
    try:
        yield client
    finally:
        await client.shutdown()


@pytest.fixture()
def resources(tracking_client: AsyncTrackingClient) -> TrackingResources:
    return TrackingResources(tracking_client)
