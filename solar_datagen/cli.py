"""
Command-line entry point: ``solar-datagen <command>``.

Commands:
- serve: run the API (and the daily timer) under uvicorn.
- generate-today: generate today's records for every active unit.
- generate-historical --days N: backfill the past N days.
- regenerate --serial S [--date D]: generate one day for one unit.
- seed-anomalies --serial S --start D --end D [--reset]: seed a date range
  with the seasonal curve and the anomaly catalog.
- check-data [--days N]: print stored records grouped by date.

Exit code is 0 on success and 1 on failure.

CHANGELOG:
- 2026-10-18: Invalidate the summary cache after seeding; report invalid date ranges as errors
- 2026-10-09: Add regenerate and serve commands
- 2026-10-07: Initial creation

TODO:
- None
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta

from pydantic import ValidationError

from solar_datagen.cache.redis_client import invalidate_summary_cache
from solar_datagen.config import DatagenSettings
from solar_datagen.errors import DatagenError
from solar_datagen.generation.synthesizer import day_start
from solar_datagen.logging_config import configure_logging, log_config_summary
from solar_datagen.runtime import Runtime, build_runtime
from solar_datagen.services.scheduler import RunSummary
from solar_datagen.services.seeding import seed_with_anomalies

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1 (got {value})")
    return number


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value}") from None


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        prog="solar-datagen",
        description="Synthetic energy telemetry generation for solar units",
    )
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API and the daily timer")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    sub.add_parser("generate-today", help="Generate today's data for all active units")

    historical = sub.add_parser(
        "generate-historical", help="Backfill the past N days for all active units"
    )
    historical.add_argument("--days", type=_positive_int, default=None)

    regenerate = sub.add_parser("regenerate", help="Generate one day for one unit")
    regenerate.add_argument("--serial", required=True)
    regenerate.add_argument("--date", type=_iso_date, default=None)

    seed = sub.add_parser(
        "seed-anomalies", help="Seed one serial over a date range with anomalies"
    )
    seed.add_argument("--serial", default="SU-TEST-2024")
    seed.add_argument("--start", type=_iso_date, default=date(2025, 8, 1))
    seed.add_argument("--end", type=_iso_date, default=date(2025, 12, 20))
    seed.add_argument(
        "--reset", action="store_true", help="Delete ALL stored records first"
    )

    check = sub.add_parser("check-data", help="Print stored records grouped by date")
    check.add_argument("--days", type=_positive_int, default=None)

    return p.parse_args(argv)


def _print_summary(summary: RunSummary) -> None:
    print(summary.message)
    for failure in summary.failures:
        print(
            f"  failed: {failure.unit_serial} {failure.day.isoformat()}: {failure.error}"
        )


async def _run_command(args: argparse.Namespace, runtime: Runtime) -> int:
    controller = runtime.controller

    if args.command == "generate-today":
        summary = await controller.run_today()
        _print_summary(summary)
        return 1 if summary.errored else 0

    if args.command == "generate-historical":
        days = args.days or runtime.settings.default_backfill_days
        summary = await controller.backfill(days)
        _print_summary(summary)
        return 1 if summary.errored else 0

    if args.command == "regenerate":
        summary = await controller.regenerate_unit(args.serial, args.date)
        _print_summary(summary)
        return 1 if summary.errored else 0

    if args.command == "seed-anomalies":
        report = await seed_with_anomalies(
            runtime.store,
            unit_serial=args.serial,
            start=args.start,
            end=args.end,
            catalog=runtime.catalog,
            rng=runtime.rng,
            reset=args.reset,
        )
        await invalidate_summary_cache(runtime.settings.redis_url)
        print(f"Total records: {report.total}")
        print(f"Normal records: {report.normal}")
        print(f"Anomaly records: {report.anomalous}")
        print(f"Anomaly percentage: {report.anomaly_percentage:.1f}%")
        print(f"Inserted: {report.inserted}")
        return 0

    if args.command == "check-data":
        since = None
        if args.days is not None:
            since = day_start(controller.today() - timedelta(days=args.days - 1))
        summaries = await runtime.store.summarize_days(since)
        if not summaries:
            print("No energy generation records found")
            return 0
        for summary in summaries:
            print(f"{summary.day.isoformat()}")
            print(f"   Records: {summary.count}")
            print(f"   Total Energy: {summary.total_energy:.2f}")
            print(f"   Units: {', '.join(summary.units)}")
        return 0

    raise ValueError(f"unknown command {args.command!r}")


async def _async_main(args: argparse.Namespace, settings: DatagenSettings) -> int:
    runtime = build_runtime(settings)
    try:
        return await _run_command(args, runtime)
    except (DatagenError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await runtime.aclose()


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "solar_datagen.api.main:app",
        host=args.host,
        port=args.port,
        log_config=None,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Synchronous entrypoint."""
    args = parse_args(argv)
    try:
        settings = DatagenSettings()
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)
    if args.command == "serve":
        return _serve(args)

    log_config_summary(settings)
    return asyncio.run(_async_main(args, settings))


if __name__ == "__main__":
    sys.exit(main())
