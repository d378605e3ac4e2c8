#!/usr/bin/env python3
"""
ShowTracker • Reconcile Watch Status
====================================

Runs the reconciliation pass for one profile: aired episodes still marked
UNAIRED become NOT_WATCHED, rescheduled ones go back to UNAIRED, and every
season/show status is recomputed. Movies get the release-date check.

Each show/movie is its own transaction; a failure is reported and the
remaining ids are still processed.

Usage
-----
    python scripts/reconcile_watch_status.py --profile 7 --show 12,13 --movie 4
    DATABASE_URL_OVERRIDE=sqlite+aiosqlite:///dev.db \
      python scripts/reconcile_watch_status.py --profile 7 --show 12
"""

import argparse
import asyncio
from typing import List, Optional, Sequence

from showtracker.core.exceptions import AppException
from showtracker.core.logger import configure_logging, logger
from showtracker.db.session import dispose_engine
from showtracker.services.watch_status_service import WatchStatusService


def _ids(values: Optional[Sequence[str]]) -> List[int]:
    out: List[int] = []
    for value in values or []:
        out.extend(int(s) for s in value.split(",") if s.strip())
    return out


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Reconcile watch status for a profile")
    ap.add_argument("--profile", type=int, required=True, help="Profile ID")
    ap.add_argument("--show", action="append", help="Show ID(s); repeatable or comma-separated")
    ap.add_argument("--movie", action="append", help="Movie ID(s); repeatable or comma-separated")
    ap.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = ap.parse_args(argv)
    args.show = _ids(args.show)
    args.movie = _ids(args.movie)
    if not args.show and not args.movie:
        ap.error("provide at least one --show or --movie")
    return args


async def reconcile(args: argparse.Namespace, service: Optional[WatchStatusService] = None) -> int:
    """Reconcile every requested id; return the number that failed."""
    service = service or WatchStatusService()
    failures = 0

    jobs = [("show", sid, service.check_and_update_show_status) for sid in args.show]
    jobs += [("movie", mid, service.check_and_update_movie_status) for mid in args.movie]

    for kind, entity_id, check in jobs:
        try:
            result = await check(args.profile, entity_id)
        except AppException as exc:
            failures += 1
            logger.error(f"{kind} {entity_id}: {exc.message}")
            continue
        logger.info(f"{kind} {entity_id}: {result.message} ({result.affected_rows} row(s))")
    return failures


async def _amain(args: argparse.Namespace) -> int:
    try:
        return await reconcile(args)
    finally:
        await dispose_engine()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    failures = asyncio.run(_amain(args))
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
