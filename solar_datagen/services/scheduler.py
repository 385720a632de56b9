"""
Scheduler controller and daily timer.

SchedulerController is the single entry point for every generation trigger
(daily timer, admin API, CLI). It owns an asyncio.Lock: a trigger arriving
while a run is active is rejected with RunInProgress, never interleaved.

Within a run, (unit, day) pairs are generated concurrently, bounded by a
semaphore of ``max_workers``. Each pair either completes or is recorded as
failed before the run returns. Per-pair errors are caught, logged with the
unit serial, and counted; only a registry failure aborts the run.

DailyTimer fires run_today() at 00:00 in the configured time zone. It is an
owned object with start()/stop(), so tests drive it without a live clock.

CHANGELOG:
- 2026-10-08: Add regenerate_unit (single-unit retrigger)
- 2026-10-06: Add DailyTimer with explicit start/stop lifecycle
- 2026-10-05: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from solar_datagen.errors import (
    DatagenError,
    RegistryUnavailable,
    RunInProgress,
    UnitNotFound,
)
from solar_datagen.models import Unit
from solar_datagen.services.generation import GenerationRun, RunOutcome, UnitResult
from solar_datagen.services.registry import UnitRegistry

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RunSummary:
    """Aggregated outcome of one controller run."""

    mode: str
    days: tuple[date, ...]
    units: int
    results: list[UnitResult] = field(default_factory=list)

    def _count(self, outcome: RunOutcome) -> int:
        return sum(1 for result in self.results if result.outcome is outcome)

    @property
    def generated(self) -> int:
        return self._count(RunOutcome.GENERATED)

    @property
    def skipped(self) -> int:
        return self._count(RunOutcome.SKIPPED)

    @property
    def errored(self) -> int:
        return self._count(RunOutcome.FAILED)

    @property
    def records_inserted(self) -> int:
        return sum(result.records_inserted for result in self.results)

    @property
    def failures(self) -> list[UnitResult]:
        return [r for r in self.results if r.outcome is RunOutcome.FAILED]

    @property
    def message(self) -> str:
        if self.units == 0:
            return "No active solar units found; nothing to generate"
        return (
            f"{self.records_inserted} records generated for {len(self.days)} day(s): "
            f"{self.generated} generated, {self.skipped} skipped, "
            f"{self.errored} errored"
        )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "days": [day.isoformat() for day in self.days],
            "units": self.units,
            "generated": self.generated,
            "skipped": self.skipped,
            "errored": self.errored,
            "records_inserted": self.records_inserted,
            "failures": [
                {
                    "unit_serial": r.unit_serial,
                    "date": r.day.isoformat(),
                    "error": r.error,
                }
                for r in self.failures
            ],
        }


class SchedulerController:
    """Runs GenerationRun across active units for today, a backfill, or one unit.

    Args:
        registry: Source of active units.
        generation_run: Per-(unit, day) unit of work.
        max_workers: Max (unit, day) pairs processed concurrently.
        clock: Returns the current aware datetime; defaults to UTC now.
        after_run: Optional coroutine called with each finished summary
            (used for cache invalidation). Its failures are logged only.
    """

    def __init__(
        self,
        registry: UnitRegistry,
        generation_run: GenerationRun,
        *,
        max_workers: int = 4,
        clock: Clock | None = None,
        after_run: Callable[[RunSummary], Awaitable[None]] | None = None,
    ) -> None:
        self._registry = registry
        self._generation_run = generation_run
        self._max_workers = max(1, max_workers)
        self._clock = clock or _utc_now
        self._after_run = after_run
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def today(self) -> date:
        """Current date in UTC."""
        return self._clock().astimezone(UTC).date()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run_today(self) -> RunSummary:
        """Generate today's data for every active unit.

        Raises:
            RunInProgress: If another run is active.
            RegistryUnavailable: If the unit list cannot be fetched.
        """
        return await self._exclusive("today", [self.today()])

    async def backfill(self, days: int) -> RunSummary:
        """Generate data for today and the ``days - 1`` preceding days.

        Raises:
            ValueError: If ``days`` is not a positive integer.
            RunInProgress: If another run is active.
            RegistryUnavailable: If the unit list cannot be fetched.
        """
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise ValueError(f"days must be a positive integer (got {days!r})")
        today = self.today()
        targets = [today - timedelta(days=i) for i in range(days)]
        return await self._exclusive("backfill", targets)

    async def regenerate_unit(self, serial: str, day: date | None = None) -> RunSummary:
        """Generate one day for a single active unit (skips if data exists).

        Raises:
            UnitNotFound: If no active unit has this serial number.
            RunInProgress: If another run is active.
            RegistryUnavailable: If the unit list cannot be fetched.
        """
        return await self._exclusive(
            "regenerate", [day or self.today()], only_serial=serial
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _exclusive(
        self,
        mode: str,
        targets: Sequence[date],
        only_serial: str | None = None,
    ) -> RunSummary:
        if self._lock.locked():
            raise RunInProgress("A generation run is already in progress")
        async with self._lock:
            summary = await self._run(mode, targets, only_serial)
        await self._notify(summary)
        return summary

    async def _run(
        self,
        mode: str,
        targets: Sequence[date],
        only_serial: str | None,
    ) -> RunSummary:
        logger.info(
            "Starting %s generation for %s",
            mode,
            ", ".join(day.isoformat() for day in targets),
        )
        units = await self._registry.fetch_active_units()
        if only_serial is not None:
            units = [unit for unit in units if unit.serial_number == only_serial]
            if not units:
                raise UnitNotFound(f"No active solar unit with serial '{only_serial}'")

        summary = RunSummary(mode=mode, days=tuple(targets), units=len(units))
        if not units:
            logger.info("No active solar units found")
            return summary

        semaphore = asyncio.Semaphore(self._max_workers)

        async def _bounded(unit: Unit, day: date) -> UnitResult:
            async with semaphore:
                return await self._run_one(unit, day)

        summary.results = list(
            await asyncio.gather(
                *(_bounded(unit, day) for day in targets for unit in units)
            )
        )
        log = logger.warning if summary.errored else logger.info
        log("Finished %s generation: %s", mode, summary.message)
        return summary

    async def _run_one(self, unit: Unit, day: date) -> UnitResult:
        try:
            return await self._generation_run.run(unit, day)
        except DatagenError as exc:
            logger.error(
                "Error generating data for unit %s on %s: %s",
                unit.serial_number,
                day.isoformat(),
                exc,
            )
            return UnitResult(unit.serial_number, day, RunOutcome.FAILED, error=str(exc))
        except Exception as exc:
            logger.error(
                "Unexpected error generating data for unit %s on %s",
                unit.serial_number,
                day.isoformat(),
                exc_info=True,
            )
            return UnitResult(unit.serial_number, day, RunOutcome.FAILED, error=str(exc))

    async def _notify(self, summary: RunSummary) -> None:
        if self._after_run is None or summary.records_inserted == 0:
            return
        try:
            await self._after_run(summary)
        except Exception:
            logger.warning("Post-run hook failed", exc_info=True)


class DailyTimer:
    """Fires ``controller.run_today()`` every day at 00:00 in ``timezone``.

    Args:
        controller: The controller to trigger.
        timezone: IANA zone name for the 00:00 schedule.
        clock: Returns the current aware datetime; defaults to UTC now.
    """

    def __init__(
        self,
        controller: SchedulerController,
        timezone: str = "UTC",
        clock: Clock | None = None,
    ) -> None:
        self._controller = controller
        self._zone = ZoneInfo(timezone)
        self._clock = clock or _utc_now
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._firing = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def seconds_until_next_run(self) -> float:
        """Seconds from now until the next local midnight."""
        now = self._clock().astimezone(self._zone)
        next_midnight = datetime.combine(
            now.date() + timedelta(days=1), time.min, tzinfo=self._zone
        )
        # Subtract in UTC so DST transitions are accounted for.
        delta = next_midnight.astimezone(UTC) - now.astimezone(UTC)
        return max(0.0, delta.total_seconds())

    def start(self) -> None:
        """Start the timer task. A second call while running is a no-op."""
        if self.running:
            logger.warning("Data generation scheduler already running")
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop(), name="daily-generation-timer")
        logger.info(
            "Data generation scheduler started (runs daily at 00:00 %s)", self._zone.key
        )

    async def stop(self) -> None:
        """Stop the timer, cancelling a tick that is in flight.

        Pending (unit, day) work of a cancelled tick is abandoned; inserts
        already in flight roll back as whole batches.
        """
        if self._task is None:
            return
        self._stop_event.set()
        if self._firing:
            self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Data generation scheduler stopped")

    async def _loop(self) -> None:
        while not self._stop_event.is_set():
            delay = self.seconds_until_next_run()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            except TimeoutError:
                self._firing = True
                try:
                    await self.fire()
                finally:
                    self._firing = False

    async def fire(self) -> RunSummary | None:
        """Run today's generation once; never raises."""
        logger.info("Running daily energy data generation")
        try:
            summary = await self._controller.run_today()
        except RunInProgress:
            logger.warning("Skipping timer trigger: a generation run is in progress")
            return None
        except RegistryUnavailable as exc:
            logger.error("Daily energy data generation failed: %s", exc)
            return None
        except Exception:
            logger.error("Daily energy data generation failed", exc_info=True)
            return None
        logger.info("Daily energy data generation completed: %s", summary.message)
        return summary
