"""Tests for configure_logging and the trace ID plumbing."""

import asyncio
import json
import logging

import pytest

from libs.common.logging import (
    LogContext,
    TraceIDFilter,
    clear_trace_id,
    configure_logging,
    get_logger,
    get_trace_id,
    set_trace_id,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    httpx_level = logging.getLogger("httpx").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)
    clear_trace_id()


class TestConfigureLogging:
    def test_installs_single_json_handler(self) -> None:
        root = configure_logging(service_name="tracking_console", log_level="DEBUG")
        configure_logging(service_name="tracking_console", log_level="DEBUG")

        assert root is logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert any(isinstance(f, TraceIDFilter) for f in root.handlers[0].filters)

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(service_name="tracking_console", log_level="LOUD")

    def test_httpx_kept_at_warning(self) -> None:
        configure_logging(service_name="tracking_console", log_level="INFO")
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_emits_json_with_trace_id(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(service_name="tracking_console", log_level="INFO")

        with LogContext("trace-abc"):
            get_logger("apps.tracking_console.test").info(
                "session_started", extra={"identity": "ops"}
            )

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["message"] == "session_started"
        assert payload["trace_id"] == "trace-abc"
        assert payload["context"] == {"identity": "ops"}


class TestTraceContext:
    def test_log_context_restores_previous(self) -> None:
        set_trace_id("outer")

        with LogContext("inner") as trace_id:
            assert trace_id == "inner"
            assert get_trace_id() == "inner"

        assert get_trace_id() == "outer"

    def test_log_context_generates_id_and_clears(self) -> None:
        clear_trace_id()

        with LogContext() as trace_id:
            assert trace_id
            assert get_trace_id() == trace_id

        assert get_trace_id() is None

    def test_empty_trace_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            set_trace_id("")

    @pytest.mark.asyncio()
    async def test_concurrent_tasks_keep_separate_ids(self) -> None:
        async def tick(name: str) -> str | None:
            with LogContext(name):
                await asyncio.sleep(0.01)
                return get_trace_id()

        results = await asyncio.gather(tick("devices"), tick("positions"))

        assert results == ["devices", "positions"]
