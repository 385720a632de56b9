"""
Structured JSON logging setup shared by the API process and the CLI.

CHANGELOG:
- 2026-10-02: Initial creation
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from datetime import UTC, datetime


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single JSON handler on stderr.

    Args:
        level: Root log level name.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def masked_secret(value: str | None) -> str:
    """Return a short non-reversible fingerprint of a secret for diagnostics."""
    if not value:
        return "empty"
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:10]
    return f"len={len(value)} sha256={digest}"


def log_config_summary(settings: object) -> None:
    """Log the effective configuration at startup, excluding secrets.

    The database URL may embed a password, so only its fingerprint is logged,
    as is the admin token.

    Args:
        settings: A DatagenSettings instance (or any object with the same attrs).
    """
    logging.getLogger(__name__).info(
        "Solar datagen starting with config: "
        "registry_base_url=%s, registry_units_path=%s, registry_timeout_s=%s, "
        "store_timeout_s=%s, max_workers=%s, insert_attempts=%s, "
        "schedule_timezone=%s, scheduler_enabled=%s, anomalies_enabled=%s, "
        "anomaly_rules_path=%s, random_seed=%s, "
        "database_url_masked=%s, admin_token_masked=%s",
        settings.registry_base_url,  # type: ignore[attr-defined]
        settings.registry_units_path,  # type: ignore[attr-defined]
        settings.registry_timeout_s,  # type: ignore[attr-defined]
        settings.store_timeout_s,  # type: ignore[attr-defined]
        settings.max_workers,  # type: ignore[attr-defined]
        settings.insert_attempts,  # type: ignore[attr-defined]
        settings.schedule_timezone,  # type: ignore[attr-defined]
        settings.scheduler_enabled,  # type: ignore[attr-defined]
        settings.anomalies_enabled,  # type: ignore[attr-defined]
        settings.anomaly_rules_path,  # type: ignore[attr-defined]
        settings.random_seed,  # type: ignore[attr-defined]
        masked_secret(settings.database_url),  # type: ignore[attr-defined]
        masked_secret(settings.admin_token),  # type: ignore[attr-defined]
    )
