"""
HTTP client for the external unit registry.

Fetches the active-unit listing as JSON and parses it into Unit models.
Any transport error, timeout, non-2xx status or non-list body raises
RegistryUnavailable, which is fatal for the run that asked for units.
Individual malformed entries are logged and skipped.

CHANGELOG:
- 2026-10-05: Initial creation
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from solar_datagen.errors import RegistryUnavailable
from solar_datagen.models import ACTIVE_STATUS, Unit

logger = logging.getLogger(__name__)


class UnitRegistry:
    """Read-only client for ``GET {base_url}{units_path}?status=ACTIVE``.

    Args:
        base_url: Registry base URL without trailing slash.
        units_path: Path of the unit listing endpoint.
        timeout_s: Request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).

    Usage::

        registry = UnitRegistry("https://core.example.com")
        units = await registry.fetch_active_units()
    """

    def __init__(
        self,
        base_url: str,
        units_path: str = "/api/solar-units/test",
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/{units_path.lstrip('/')}"
        self._timeout_s = timeout_s
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url

    async def fetch_active_units(self) -> list[Unit]:
        """Return the units whose status is ACTIVE.

        Raises:
            RegistryUnavailable: If the registry cannot be queried or its
                response is not a JSON list.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport
            ) as client:
                response = await client.get(
                    self._url, params={"status": ACTIVE_STATUS}
                )
        except httpx.TimeoutException as exc:
            raise RegistryUnavailable(
                f"Unit registry timed out after {self._timeout_s}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise RegistryUnavailable(f"Unit registry request failed: {exc}") from exc

        if not response.is_success:
            raise RegistryUnavailable(
                f"Unit registry returned HTTP {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise RegistryUnavailable("Unit registry returned invalid JSON") from exc
        if not isinstance(payload, list):
            raise RegistryUnavailable(
                f"Unit registry returned {type(payload).__name__}, expected a list"
            )

        units: list[Unit] = []
        for idx, entry in enumerate(payload):
            try:
                units.append(Unit.model_validate(entry))
            except ValidationError:
                logger.warning(
                    "Skipping malformed registry entry at position %d", idx
                )

        active = [unit for unit in units if unit.is_active]
        logger.info("Found %d active solar unit(s)", len(active))
        return active
