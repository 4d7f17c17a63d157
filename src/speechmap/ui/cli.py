# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from speechmap.app import (
    list_candidates,
    list_organizations,
    list_speeches,
    normalize,
    run_all_sources,
    run_source,
    seed,
    start_scheduler,
    stats,
)
from speechmap.config import ConfigurationError, configure_logging, get_ingestion_config
from speechmap.domain.errors import SourceConfigurationError
from speechmap.domain.model import DEFAULT_SEARCH_LIMIT, SpeechFilter
from speechmap.domain.queries import organization_to_dict
from speechmap.scheduler import StartToken

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import tzinfo
    from types import FrameType

log = logging.getLogger(__name__)

_SCHEDULER_POLL_SECONDS = 1.0


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest and query political speech schedules")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Ingest all sources, or a single one")
    run.add_argument(
        "--source",
        type=str,
        help="Name of a single source to ingest (defaults to all sources)",
    )

    schedule = subparsers.add_parser("schedule", help="Ingest now and then on a fixed interval")
    schedule.add_argument(
        "--interval-minutes",
        type=float,
        help="Minutes between runs (defaults to SPEECHMAP_SCHEDULE_INTERVAL_MINUTES or 60)",
    )
    schedule.add_argument(
        "--no-align",
        action="store_true",
        help="Run every interval from now instead of on interval boundaries",
    )

    subparsers.add_parser("seed", help="Create or update the default organizations")
    subparsers.add_parser("normalize", help="Strip whitespace from stored names")

    speeches = subparsers.add_parser("speeches", help="List stored speeches as JSON lines")
    speeches.add_argument(
        "--organization-id",
        action="append",
        default=[],
        help="Only speeches of this organization (repeatable)",
    )
    speeches.add_argument(
        "--candidate-id",
        action="append",
        default=[],
        help="Only speeches of this candidate (repeatable)",
    )
    speeches.add_argument("--start", type=str, help="ISO-8601 inclusive lower bound")
    speeches.add_argument("--end", type=str, help="ISO-8601 inclusive upper bound")
    speeches.add_argument(
        "--around",
        type=str,
        help="ISO-8601 timestamp; list located speeches within --range-hours of it",
    )
    speeches.add_argument(
        "--range-hours",
        type=float,
        default=1.0,
        help="Half-width of the --around window in hours (default: %(default)s)",
    )
    location = speeches.add_mutually_exclusive_group()
    location.add_argument("--located", action="store_true", help="Only geocoded speeches")
    location.add_argument("--unlocated", action="store_true", help="Only speeches without coordinates")
    speeches.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_SEARCH_LIMIT,
        help="Maximum number of speeches to list (default: %(default)s)",
    )
    speeches.add_argument("--offset", type=int, default=0, help="Number of speeches to skip")

    subparsers.add_parser("organizations", help="List organizations as JSON lines")
    candidates = subparsers.add_parser("candidates", help="List candidates as JSON lines")
    candidates.add_argument(
        "--organization-id",
        type=str,
        help="Only candidates of this organization",
    )
    subparsers.add_parser("stats", help="Print speech totals as JSON")

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str, timezone: tzinfo) -> datetime:
    """Parse an ISO timestamp; naive values are local to ``timezone``."""

    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone)
    return dt


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _build_filter(args: argparse.Namespace, timezone: tzinfo) -> SpeechFilter:
    start = _parse_iso_datetime(args.start, timezone) if args.start else None
    end = _parse_iso_datetime(args.end, timezone) if args.end else None
    if start and end and start > end:
        raise ValueError("Time window start must be before end")
    has_location: bool | None = None
    if args.located:
        has_location = True
    elif args.unlocated:
        has_location = False
    return SpeechFilter(
        organization_ids=tuple(_parse_uuid(value) for value in args.organization_id),
        candidate_ids=tuple(_parse_uuid(value) for value in args.candidate_id),
        start=start,
        end=end,
        has_location=has_location,
        limit=args.limit,
        offset=args.offset,
    )


def _run(args: argparse.Namespace) -> int:
    try:
        if args.source:
            report = run_source(args.source)
            print(json.dumps(report.to_dict(), ensure_ascii=False))
            return 0
        summary = run_all_sources()
    except (SourceConfigurationError, ConfigurationError):
        log.exception("Cannot run %s", args.source or "sources")
        return 2

    print(json.dumps(summary.to_dict(), ensure_ascii=False))
    return 1 if summary.failed else 0


def _schedule(args: argparse.Namespace) -> int:
    interval = (
        timedelta(minutes=args.interval_minutes) if args.interval_minutes is not None else None
    )
    scheduler = start_scheduler(
        StartToken(),
        interval=interval,
        align_to_interval=not args.no_align,
    )
    if scheduler is None:
        return 1
    try:
        while scheduler.running:
            scheduler.join(_SCHEDULER_POLL_SECONDS)
    finally:
        scheduler.stop(timeout=_SCHEDULER_POLL_SECONDS)
    return 0


def _speech_query(
    args: argparse.Namespace,
    timezone: tzinfo,
) -> tuple[SpeechFilter, datetime | None]:
    criteria = _build_filter(args, timezone)
    around = _parse_iso_datetime(args.around, timezone) if args.around else None
    if around is not None and args.range_hours < 0:
        raise ValueError("--range-hours must be non-negative")
    return criteria, around


def _speeches(args: argparse.Namespace, criteria: SpeechFilter, around: datetime | None) -> int:
    for listing in list_speeches(criteria, around=around, range_hours=args.range_hours):
        print(json.dumps(listing.to_dict(), ensure_ascii=False))
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        configure_logging()
        parsed_args = _parse_args(args_list)
        query: tuple[SpeechFilter, datetime | None] = (SpeechFilter(), None)
        organization_id: UUID | None = None
        if parsed_args.command == "speeches":
            query = _speech_query(parsed_args, get_ingestion_config().timezone)
        if parsed_args.command == "candidates" and parsed_args.organization_id:
            organization_id = _parse_uuid(parsed_args.organization_id)
        if parsed_args.command == "schedule" and (
            parsed_args.interval_minutes is not None and parsed_args.interval_minutes <= 0
        ):
            raise ValueError("--interval-minutes must be positive")
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "run":
            status = _run(parsed_args)
        elif parsed_args.command == "schedule":
            status = _schedule(parsed_args)
        elif parsed_args.command == "seed":
            result = seed()
            log.info("Seed finished: created=%s, updated=%s", result.created, result.updated)
            status = 0
        elif parsed_args.command == "normalize":
            report = normalize()
            log.info(
                "Normalization finished: renamed=%s, skipped=%s, speeches=%s",
                report.candidates_renamed,
                report.candidates_skipped,
                report.speeches_updated,
            )
            status = 0
        elif parsed_args.command == "speeches":
            status = _speeches(parsed_args, *query)
        elif parsed_args.command == "organizations":
            for organization in list_organizations():
                print(json.dumps(organization_to_dict(organization), ensure_ascii=False))
            status = 0
        elif parsed_args.command == "candidates":
            for candidate in list_candidates(organization_id):
                print(json.dumps(candidate.to_dict(), ensure_ascii=False))
            status = 0
        elif parsed_args.command == "stats":
            print(json.dumps(stats().to_dict(), ensure_ascii=False))
            status = 0
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    if status:
        sys.exit(status)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
