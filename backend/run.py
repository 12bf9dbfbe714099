"""
Run PEACH permit status jobs.

Usage:
    python run.py summarize records.json   # Summarize an exported PEACH record file
    python run.py sync                     # Sync permits from PEACH once
    python run.py schedule                 # Sync on an interval until interrupted
    python run.py schedule --run-now       # Sync immediately, then on the interval
"""
import argparse
import asyncio
import json
import sys
from typing import List

from pydantic import TypeAdapter

from permit_sync.config.settings import settings
from permit_sync.domain.errors import DomainError, ValidationError
from permit_sync.domain.models import PeachRecord
from permit_sync.parsers.peach_parser import parse_peach_records
from permit_sync.utils.logger import setup_logging, get_logger, set_correlation_id
from permit_sync.utils.idgen import generate_correlation_id

logger = get_logger(__name__)

_records_adapter = TypeAdapter(List[PeachRecord])


def _summarize(args: argparse.Namespace) -> int:
    try:
        with open(args.file, encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = [data]
        records = _records_adapter.validate_python(data)
    except ValueError as e:
        # Bad JSON or a payload that is not PEACH records
        raise ValidationError(
            f"{args.file} is not a PEACH record export",
            details={"file": args.file, "error": str(e)}
        ) from e

    summaries = parse_peach_records(records)
    print(json.dumps(
        {key: summary.model_dump(mode="json") for key, summary in summaries.items()},
        indent=2
    ))
    return 0


def _sync(args: argparse.Namespace) -> int:
    from permit_sync.repositories.mongo_client import close_connection
    from permit_sync.services.peach_sync_service import PeachSyncService

    set_correlation_id(generate_correlation_id())
    try:
        result = asyncio.run(PeachSyncService().sync_peach_records())
    finally:
        close_connection()
    print(result.model_dump_json(indent=2))
    return 0


async def _run_scheduler(run_now: bool) -> None:
    from permit_sync.scheduler.sync_scheduler import get_scheduler, start_scheduler, stop_scheduler

    start_scheduler()
    try:
        if run_now:
            await get_scheduler().run_sync()
        await asyncio.Event().wait()
    finally:
        stop_scheduler()


def _schedule(args: argparse.Namespace) -> int:
    from permit_sync.repositories.mongo_client import close_connection, create_indexes

    create_indexes()
    print("Starting PEACH sync scheduler...")
    print(f"  PEACH API: {settings.peach_api_base_url}")
    print(f"  Interval: {settings.peach_sync_interval_minutes} minutes")
    print(f"  Enabled: {settings.peach_sync_enabled}")
    print()
    try:
        asyncio.run(_run_scheduler(args.run_now))
    except KeyboardInterrupt:
        pass
    finally:
        close_connection()
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="PEACH permit status sync")
    subparsers = parser.add_subparsers(dest="command", required=True)

    summarize_parser = subparsers.add_parser(
        "summarize",
        help="Summarize PEACH records from a JSON file (one record or a list)"
    )
    summarize_parser.add_argument("file", type=str, help="Path to the JSON export")
    summarize_parser.set_defaults(handler=_summarize)

    sync_parser = subparsers.add_parser("sync", help="Sync permits from PEACH once")
    sync_parser.set_defaults(handler=_sync)

    schedule_parser = subparsers.add_parser("schedule", help="Sync permits from PEACH on an interval")
    schedule_parser.add_argument(
        "--run-now",
        action="store_true",
        help="Run a sync immediately instead of waiting for the first interval"
    )
    schedule_parser.set_defaults(handler=_schedule)

    args = parser.parse_args(argv)
    setup_logging()

    try:
        return args.handler(args)
    except DomainError as e:
        logger.error(f"{e.error_code}: {e.message}", extra={"error_type": e.error_code})
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
