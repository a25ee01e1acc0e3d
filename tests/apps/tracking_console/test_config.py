"""Unit tests for tracking console configuration.

Import-time validation runs in a subprocess with a controlled environment so
the already-imported module stays untouched.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from apps.tracking_console.config import _env_bool, _env_float
from libs.common.exceptions import ConfigurationError

PROJECT_ROOT = str(Path(__file__).parent.parent.parent.parent.resolve())


def _import_config(env: dict[str, str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-c", "import apps.tracking_console.config"],
        env={"PATH": "", "PYTHONPATH": ".", **env},
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
    )


class TestEnvHelpers:
    def test_env_bool_truthy_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for raw in ("1", "true", "YES", "on"):
            monkeypatch.setenv("TC_FLAG", raw)
            assert _env_bool("TC_FLAG", "false") is True

        monkeypatch.setenv("TC_FLAG", "nope")
        assert _env_bool("TC_FLAG", "true") is False

    def test_env_bool_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TC_FLAG", raising=False)
        assert _env_bool("TC_FLAG", "true") is True

    def test_env_float_parses(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TC_INTERVAL", "2.5")
        assert _env_float("TC_INTERVAL", "30", minimum=1.0) == 2.5

    def test_env_float_rejects_garbage(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TC_INTERVAL", "soon")
        with pytest.raises(ConfigurationError, match="TC_INTERVAL must be a number"):
            _env_float("TC_INTERVAL", "30", minimum=1.0)

    def test_env_float_enforces_minimum(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TC_INTERVAL", "0.5")
        with pytest.raises(ConfigurationError, match="must be >= 1.0"):
            _env_float("TC_INTERVAL", "30", minimum=1.0)


class TestModuleValidation:
    def test_defaults_import_cleanly(self) -> None:
        result = _import_config({"TRACKING_CONSOLE_DEBUG": "true"})
        assert result.returncode == 0, result.stderr

    def test_unknown_token_backend_raises(self) -> None:
        result = _import_config({"TOKEN_STORAGE_BACKEND": "memcached"})
        assert result.returncode != 0
        assert "TOKEN_STORAGE_BACKEND must be one of" in result.stderr

    def test_invalid_refresh_interval_raises(self) -> None:
        result = _import_config({"POSITION_REFRESH_SECONDS": "0"})
        assert result.returncode != 0
        assert "POSITION_REFRESH_SECONDS must be >=" in result.stderr
