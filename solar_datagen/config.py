"""
Service configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
All values come from environment variables or a .env file; nothing about
the deployment (database, registry, cache) is hardcoded.

CHANGELOG:
- 2026-10-06: Add admin_token and anomaly_rules_path
- 2026-10-02: Initial creation

TODO:
- None
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings


class DatagenSettings(BaseSettings):
    """Configuration for the generation service, API and CLI.

    Attributes:
        database_url: SQLAlchemy async URL of the record store.
        registry_base_url: Base URL of the unit registry (http or https).
        registry_units_path: Path of the active-units listing.
        registry_timeout_s: Timeout for a registry request in seconds.
        store_timeout_s: Timeout for a single record store call in seconds.
        redis_url: Redis URL for the summary cache.
        cache_ttl_s: TTL of cached summaries in seconds.
        max_workers: Max (unit, day) generations running concurrently.
        insert_attempts: Attempts for a day's batch insert before giving up.
        schedule_timezone: IANA zone in which the daily timer fires at 00:00.
        scheduler_enabled: Start the daily timer with the API process.
        anomalies_enabled: Apply the anomaly catalog to synthesized days.
        anomaly_rules_path: Optional JSON file replacing the default catalog.
        random_seed: Optional seed for reproducible synthesis.
        admin_token: When set, admin routes require this bearer token.
        default_backfill_days: Days used when a backfill omits ``days``.
        log_level: Root log level.
    """

    database_url: str
    registry_base_url: str
    registry_units_path: str = "/api/solar-units/test"
    registry_timeout_s: float = 30.0
    store_timeout_s: float = 10.0
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_s: int = 60
    max_workers: int = 4
    insert_attempts: int = 2
    schedule_timezone: str = "UTC"
    scheduler_enabled: bool = True
    anomalies_enabled: bool = True
    anomaly_rules_path: str | None = None
    random_seed: int | None = None
    admin_token: str = ""
    default_backfill_days: int = 7
    log_level: str = "INFO"

    @field_validator("registry_base_url")
    @classmethod
    def registry_url_must_be_http(cls, v: str) -> str:
        """Validate the registry URL scheme and strip a trailing slash."""
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError(
                f"REGISTRY_BASE_URL must be an http(s) URL (got: '{v[:20]}...')"
            )
        return v.rstrip("/")

    @field_validator("registry_timeout_s", "store_timeout_s")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        """Validate that call timeouts are positive."""
        if v <= 0:
            raise ValueError("Timeouts must be > 0 seconds")
        return v

    @field_validator("max_workers")
    @classmethod
    def max_workers_must_be_valid(cls, v: int) -> int:
        """Validate worker pool size is between 1 and 64."""
        if v < 1 or v > 64:
            raise ValueError("MAX_WORKERS must be >= 1 and <= 64")
        return v

    @field_validator("insert_attempts", "default_backfill_days")
    @classmethod
    def must_be_at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    @field_validator("cache_ttl_s")
    @classmethod
    def cache_ttl_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("CACHE_TTL_S must be >= 0")
        return v

    @field_validator("schedule_timezone")
    @classmethod
    def schedule_timezone_must_exist(cls, v: str) -> str:
        """Validate that the timer zone is a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"SCHEDULE_TIMEZONE '{v}' is not a known time zone") from None
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL '{v}' is not a valid level")
        return level

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
