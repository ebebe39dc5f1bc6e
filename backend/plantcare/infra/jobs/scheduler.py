"""Reminder scheduler: hourly due check and a daily digest in one background task."""
import asyncio
import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from plantcare.domain.reminders.services import ReminderService, ScanReport
from plantcare.infra.db.repositories.plant_repo import PlantRepositoryImpl
from plantcare.infra.push.sender import WebPushDispatcher

logger = logging.getLogger(__name__)


def next_daily_run(now: datetime, hour: int, tz: tzinfo) -> datetime:
    """Next instant (aware UTC) strictly after ``now`` when the local clock in ``tz`` reads hour:00."""
    local_now = now.astimezone(tz)
    candidate = local_now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= local_now:
        candidate = (candidate.replace(tzinfo=None) + timedelta(days=1)).replace(tzinfo=tz)
    return candidate.astimezone(timezone.utc)


class ReminderScheduler:
    """
    Runs ReminderService on a fixed cadence inside the API process.

    Runs are serialized by a lock, so a due check and a digest (or a manual run)
    never dispatch at the same time. With several API processes, enable the
    scheduler in only one of them or trigger ``scripts/run_reminders.py`` from cron.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_minutes: int = 60,
        digest_hour: int = 9,
        tz: tzinfo = timezone.utc,
    ):
        self.session_factory = session_factory
        self.interval = timedelta(minutes=interval_minutes)
        self.digest_hour = digest_hour
        self.tz = tz
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    async def _run(self, job: Callable[[ReminderService], Awaitable[ScanReport]]) -> ScanReport:
        async with self._lock:
            async with self.session_factory() as session:
                service = ReminderService(PlantRepositoryImpl(session), WebPushDispatcher(session))
                return await job(service)

    async def run_due_check(self, now: Optional[datetime] = None) -> ScanReport:
        return await self._run(lambda service: service.run_due_check(now))

    async def run_daily_digest(self, now: Optional[datetime] = None) -> ScanReport:
        return await self._run(lambda service: service.run_daily_digest(now))

    async def _safe(self, name: str, run: Callable[[], Awaitable[ScanReport]]) -> None:
        try:
            report = await run()
            logger.info("Reminder job %s finished: %s", name, report.model_dump())
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Reminder job %s failed", name)

    async def _loop(self) -> None:
        now = datetime.now(timezone.utc)
        next_check = now + self.interval
        next_digest = next_daily_run(now, self.digest_hour, self.tz)
        logger.info(
            "Reminder scheduler started: due check every %s, digest at %02d:00 %s (next %s)",
            self.interval,
            self.digest_hour,
            self.tz,
            next_digest.isoformat(),
        )
        while True:
            wake = min(next_check, next_digest)
            delay = (wake - datetime.now(timezone.utc)).total_seconds()
            if delay > 0:
                await asyncio.sleep(delay)
            now = datetime.now(timezone.utc)
            if now >= next_check:
                await self._safe("due_check", self.run_due_check)
                next_check = now + self.interval
            if now >= next_digest:
                await self._safe("daily_digest", self.run_daily_digest)
                next_digest = next_daily_run(now, self.digest_hour, self.tz)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
