from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Any, Optional, Sequence

import orjson

from .api import api_state
from .api.serializers import serialize_conflict, serialize_status, serialize_warning
from .core import ANY_MEMBER
from .domain import DateRange
from .logging import configure_logging
from .services.http import run_local_server

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rota Ledger command line interface.")
    parser.add_argument("--log-level", default=None, help="Override ROTA_LOG_LEVEL.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    status_parser = subparsers.add_parser("status", help="Print the completion status of each day in a window.")
    _add_window_arguments(status_parser)
    status_parser.add_argument("--all-members", action="store_true", help="Count answers from any member.")
    status_parser.add_argument("--force", action="store_true", help="Resync availability even if already synced.")

    conflicts_parser = subparsers.add_parser("conflicts", help="Print unresolved assignment conflicts.")
    _add_window_arguments(conflicts_parser)

    api_parser = subparsers.add_parser("api", help="Start the FastAPI server exposing the scheduling functions.")
    api_parser.add_argument("--host", default="127.0.0.1")
    api_parser.add_argument("--port", type=int, default=8000)

    return parser


def _add_window_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--start", type=date.fromisoformat, default=None, help="First day (YYYY-MM-DD).")
    parser.add_argument("--end", type=date.fromisoformat, default=None, help="Last day (YYYY-MM-DD).")


def _window(start: Optional[date], end: Optional[date]) -> DateRange:
    default = api_state.default_range()
    return DateRange(start or default.start, end or default.end)


def _emit(payload: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2) + b"\n")


async def _status(args: argparse.Namespace) -> dict:
    session = api_state.require_session()
    date_range = _window(args.start, args.end)
    try:
        await session.refresh(date_range, force=args.force)
        statuses = session.statuses_between(date_range, scope=ANY_MEMBER if args.all_members else None)
        return {
            "statuses": [serialize_status(item) for item in statuses if item.has_service],
            "warnings": [serialize_warning(item) for item in session.data_quality_warnings(date_range)],
        }
    finally:
        await session.close()


async def _conflicts(args: argparse.Namespace) -> dict:
    session = api_state.require_session()
    date_range = _window(args.start, args.end)
    try:
        await session.refresh(date_range)
        return {"conflicts": [serialize_conflict(item) for item in session.pending_conflicts()]}
    finally:
        await session.close()


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    logger.info("Rota Ledger CLI starting")

    if args.command == "status":
        _emit(asyncio.run(_status(args)))
    elif args.command == "conflicts":
        _emit(asyncio.run(_conflicts(args)))
    elif args.command == "api":
        run_local_server(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
