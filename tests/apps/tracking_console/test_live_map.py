"""Tests for LiveMapModel wiring of snapshots, poller and projector."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from apps.tracking_console.core.live_map import LiveMapModel
from apps.tracking_console.core.poller import Poller
from apps.tracking_console.core.projector import Marker
from apps.tracking_console.schemas import Device, Position
from tests.apps.tracking_console.factories import make_device, make_position


class FakeResources:
    """Stands in for TrackingResources with controllable fetches."""

    def __init__(self) -> None:
        self.devices: list[Device] = []
        self.positions: list[Position] = []
        self.device_gate: asyncio.Event | None = None
        self.position_calls = 0

    async def list_devices(self) -> list[Device]:
        if self.device_gate is not None:
            await self.device_gate.wait()
        return list(self.devices)

    async def latest_positions(self) -> list[Position]:
        self.position_calls += 1
        return list(self.positions)


async def _wait_until(predicate, timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


def _model(resources: FakeResources, **kwargs: Any) -> tuple[LiveMapModel, Poller]:
    poller = Poller()
    model = LiveMapModel(resources, poller, width=360, height=180, **kwargs)  # type: ignore[arg-type]
    return model, poller


@pytest.mark.asyncio()
async def test_refresh_now_projects_markers() -> None:
    resources = FakeResources()
    resources.devices = [make_device(1), make_device(2)]
    resources.positions = [make_position(1, 1, 10.0, 20.0), make_position(2, 3, 0.0, 0.0)]
    emitted: list[list[Marker]] = []
    model, _ = _model(resources, on_markers=emitted.append)

    await model.refresh_now()

    assert model.loaded is True
    assert model.position_count == 2
    assert [marker.deviceId for marker in model.markers] == [1]
    assert model.markers[0].screenX == pytest.approx(200.0)
    assert emitted[-1] == model.markers


@pytest.mark.asyncio()
async def test_slow_device_list_does_not_delay_positions() -> None:
    resources = FakeResources()
    resources.device_gate = asyncio.Event()
    resources.positions = [make_position(1, 1)]
    model, poller = _model(resources)

    model.start(device_interval=60, position_interval=0.01)
    await _wait_until(lambda: resources.position_calls >= 3)

    assert model.positions.generation >= 3
    assert model.devices.loaded is False
    assert model.markers == []

    resources.device_gate.set()
    await poller.shutdown()


@pytest.mark.asyncio()
async def test_markers_follow_device_snapshot() -> None:
    resources = FakeResources()
    resources.positions = [make_position(1, 1), make_position(2, 2)]
    resources.devices = [make_device(1), make_device(2)]
    model, poller = _model(resources)

    model.start(device_interval=60, position_interval=60)
    await _wait_until(lambda: model.loaded)
    await poller.shutdown()

    assert sorted(marker.deviceId for marker in model.markers) == [1, 2]


@pytest.mark.asyncio()
async def test_stop_discards_in_flight_results() -> None:
    resources = FakeResources()
    resources.device_gate = asyncio.Event()
    resources.devices = [make_device(1)]
    resources.positions = [make_position(1, 1)]
    model, _ = _model(resources)

    model.start(device_interval=60, position_interval=60)
    await _wait_until(lambda: model.positions.loaded)
    model.stop()
    resources.device_gate.set()
    await asyncio.sleep(0.05)

    assert model.devices.loaded is False
    assert model.markers == []


@pytest.mark.asyncio()
async def test_tooltip_toggle_persists_across_refresh() -> None:
    resources = FakeResources()
    resources.devices = [make_device(1)]
    resources.positions = [make_position(1, 1, 10.0, 20.0)]
    emitted: list[list[Marker]] = []
    model, _ = _model(resources, on_markers=emitted.append)
    await model.refresh_now()

    model.toggle_tooltip(1)
    resources.positions = [make_position(2, 1, 12.0, 22.0)]
    await model.refresh_now()

    assert model.markers[0].tooltipOpen is True
    assert model.markers[0].screenX == pytest.approx(202.0)
    assert any(markers and markers[0].tooltipOpen for markers in emitted)


@pytest.mark.asyncio()
async def test_toggle_unknown_device_emits_nothing() -> None:
    emitted: list[list[Marker]] = []
    model, _ = _model(FakeResources(), on_markers=emitted.append)

    model.toggle_tooltip(42)

    assert emitted == []


@pytest.mark.asyncio()
async def test_resize_reprojects_markers() -> None:
    resources = FakeResources()
    resources.devices = [make_device(1)]
    resources.positions = [make_position(1, 1, 10.0, 20.0)]
    model, _ = _model(resources)
    await model.refresh_now()

    model.resize(720, 360)

    assert model.markers[0].screenX == pytest.approx(400.0)
    assert model.markers[0].screenY == pytest.approx(160.0)


@pytest.mark.asyncio()
async def test_fetch_errors_reach_on_error() -> None:
    class BrokenResources(FakeResources):
        async def latest_positions(self) -> list[Position]:
            raise RuntimeError("positions unavailable")

    errors: list[Exception] = []
    model, _ = _model(BrokenResources(), on_error=errors.append)

    with pytest.raises(RuntimeError):
        await model.refresh_now()

    assert [str(exc) for exc in errors] == ["positions unavailable"]
