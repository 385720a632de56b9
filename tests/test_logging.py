"""
Tests for JSON logging and the startup configuration summary.

Tests verify:
- JsonFormatter emits one JSON object with ts, level, logger and msg.
- Exceptions are included when present.
- Secrets are fingerprinted, never logged in clear text.

CHANGELOG:
- 2026-10-09: Initial creation

TODO:
- None
"""

import json
import logging
import sys

import pytest

from solar_datagen.config import DatagenSettings
from solar_datagen.logging_config import JsonFormatter, log_config_summary, masked_secret


def _record(msg: str, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        "solar_datagen.test", logging.INFO, __file__, 1, msg, (), exc_info
    )


class TestJsonFormatter:
    def test_fields(self) -> None:
        entry = json.loads(JsonFormatter().format(_record("hello")))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "solar_datagen.test"
        assert entry["msg"] == "hello"
        assert entry["ts"].endswith("+00:00")
        assert "exception" not in entry

    def test_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            entry = json.loads(JsonFormatter().format(_record("failed", sys.exc_info())))
        assert "RuntimeError: boom" in entry["exception"]


class TestMaskedSecret:
    def test_empty(self) -> None:
        assert masked_secret("") == "empty"
        assert masked_secret(None) == "empty"

    def test_fingerprint(self) -> None:
        masked = masked_secret("hunter2")
        assert masked.startswith("len=7 sha256=")
        assert "hunter2" not in masked


class TestConfigSummary:
    def test_secrets_not_logged(
        self,
        env_required: dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://app:pw-123@db/solar")
        monkeypatch.setenv("ADMIN_TOKEN", "tok-456")
        with caplog.at_level(logging.INFO):
            log_config_summary(DatagenSettings())
        assert "registry_base_url=https://core.example.com" in caplog.text
        assert "pw-123" not in caplog.text
        assert "tok-456" not in caplog.text
