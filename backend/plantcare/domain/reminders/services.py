"""Due-plant scanner and reminder dispatch.

Two scans share one grouping policy: plants are grouped by owner and every
owner gets exactly one notification per run, naming the plant when only one
is concerned and giving the count otherwise.

- due check (hourly): ``next_watering_at <= now``
- daily digest: ``next_watering_at <= now + 1 day``

Reminders are at-least-once: a plant stays due, and is reminded about again on
every run, until a watering is recorded for it.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel

from plantcare.domain.common.types import utcnow
from plantcare.domain.notifications.models import ReminderPayload
from plantcare.domain.notifications.services import NotificationDispatcher
from plantcare.domain.plants.models import Plant
from plantcare.domain.plants.services import PlantRepository

logger = logging.getLogger(__name__)

DUE_REMINDER_TYPE = "watering_reminder"
DAILY_DIGEST_TYPE = "daily_reminder"
DIGEST_WINDOW = timedelta(days=1)


class ScanReport(BaseModel):
    """What one scan run did."""

    users_notified: int = 0
    plants_due: int = 0
    deliveries: int = 0
    failed: int = 0
    pruned: int = 0


def group_by_owner(plants: list[Plant]) -> dict[str, list[Plant]]:
    """Group plants by user_id, keeping the input order inside each group."""
    grouped: dict[str, list[Plant]] = {}
    for plant in plants:
        grouped.setdefault(plant.user_id, []).append(plant)
    return grouped


async def scan_due(plant_repo: PlantRepository, now: datetime) -> dict[str, list[Plant]]:
    """Plants whose due time has passed, grouped by owner."""
    return group_by_owner(await plant_repo.list_due_by(now))


async def scan_upcoming(
    plant_repo: PlantRepository, now: datetime, window: timedelta = DIGEST_WINDOW
) -> dict[str, list[Plant]]:
    """Plants due now or within ``window``, grouped by owner."""
    return group_by_owner(await plant_repo.list_due_by(now + window))


def _metadata(kind: str, plants: list[Plant]) -> dict:
    return {
        "type": kind,
        "plantIds": [p.id for p in plants],
        "plantCount": len(plants),
    }


def build_due_reminder(plants: list[Plant]) -> ReminderPayload:
    """One reminder for all of a user's due plants."""
    if len(plants) == 1:
        body = f"{plants[0].name} needs water"
    else:
        body = f"{len(plants)} plants need water"
    return ReminderPayload(
        title="🌱 Time to water!",
        body=body,
        data=_metadata(DUE_REMINDER_TYPE, plants),
    )


def build_daily_digest(plants: list[Plant]) -> ReminderPayload:
    """Morning digest of plants due today or tomorrow."""
    if len(plants) == 1:
        body = f"{plants[0].name} needs attention today"
    else:
        body = f"{len(plants)} plants to check today"
    return ReminderPayload(
        title="🌿 Daily reminder",
        body=body,
        data=_metadata(DAILY_DIGEST_TYPE, plants),
    )


class ReminderService:
    """Runs scans and hands one payload per user to the dispatcher."""

    def __init__(self, plant_repo: PlantRepository, dispatcher: NotificationDispatcher):
        self.plant_repo = plant_repo
        self.dispatcher = dispatcher

    async def run_due_check(self, now: Optional[datetime] = None) -> ScanReport:
        """Hourly: remind owners of plants that are due."""
        now = now or utcnow()
        logger.info("Checking plants needing water...")
        grouped = await scan_due(self.plant_repo, now)
        report = await self._dispatch(grouped, build_due_reminder)
        logger.info(
            "Sent watering reminders for %d plants to %d users",
            report.plants_due,
            report.users_notified,
        )
        return report

    async def run_daily_digest(self, now: Optional[datetime] = None) -> ScanReport:
        """Daily: digest of plants due within a day."""
        now = now or utcnow()
        logger.info("Sending daily plant care reminders...")
        grouped = await scan_upcoming(self.plant_repo, now)
        report = await self._dispatch(grouped, build_daily_digest)
        logger.info("Sent daily reminders to %d users", report.users_notified)
        return report

    async def _dispatch(self, grouped: dict[str, list[Plant]], build) -> ScanReport:
        report = ScanReport()
        for user_id, plants in grouped.items():
            payload = build(plants)
            report.plants_due += len(plants)
            try:
                results = await self.dispatcher.send_to_user(
                    user_id, payload.title, payload.body, payload.data
                )
            except Exception as e:
                # one user's failure must not stop the run
                logger.error("Reminder dispatch failed for user %s: %s", user_id, e)
                report.failed += 1
                continue
            report.users_notified += 1
            report.deliveries += sum(1 for r in results if r.ok)
            report.failed += sum(1 for r in results if not r.ok)
            report.pruned += sum(1 for r in results if r.pruned)
        return report
