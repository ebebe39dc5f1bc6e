#!/usr/bin/env python3
"""
Run one reminder pass and exit. For cron, or when the in-process scheduler is disabled.

Usage (from backend dir):
  python scripts/run_reminders.py            # due check
  python scripts/run_reminders.py --digest   # daily digest
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure backend package is on path when run as script
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from plantcare.infra.db.base import AsyncSessionLocal, engine
from plantcare.infra.jobs.scheduler import ReminderScheduler
from plantcare.settings import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("run_reminders")


async def run(digest: bool) -> int:
    scheduler = ReminderScheduler(
        AsyncSessionLocal,
        interval_minutes=settings.due_check_interval_minutes,
        digest_hour=settings.daily_digest_hour,
        tz=settings.schedule_tz,
    )
    try:
        if digest:
            report = await scheduler.run_daily_digest()
        else:
            report = await scheduler.run_due_check()
    finally:
        await engine.dispose()
    logger.info("Done: %s", report.model_dump())
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--digest", action="store_true", help="send the daily digest instead of the due check")
    args = parser.parse_args()
    return asyncio.run(run(args.digest))


if __name__ == "__main__":
    sys.exit(main())
