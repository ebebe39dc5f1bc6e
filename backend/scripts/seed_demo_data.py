#!/usr/bin/env python3
"""
Seed a demo account with a few plants and a watering history. An existing demo
user is deleted first (with its plants and waterings), so reruns start clean.

Usage (from backend dir, after migrations):
  python scripts/seed_demo_data.py
"""
import asyncio
import sys
from datetime import timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from plantcare.domain.common.types import utcnow
from plantcare.domain.plants.services import PlantService
from plantcare.domain.users.services import UserService
from plantcare.domain.waterings.services import WateringService
from plantcare.infra.db.base import AsyncSessionLocal, engine
from plantcare.infra.db.repositories.plant_repo import PlantRepositoryImpl
from plantcare.infra.db.repositories.user_repo import UserRepositoryImpl
from plantcare.infra.db.repositories.watering_repo import WateringRepositoryImpl
from plantcare.infra.security.password import get_password_hash
from plantcare.settings import settings

DEMO_EMAIL = "demo@plantcare.app"
DEMO_PASSWORD = "demo1234"

# name, species, location, amount ml, frequency days, days since last watering
DEMO_PLANTS = [
    ("Monstera", "Monstera deliciosa", "Living room", 500, 7, 8),
    ("Fern", "Nephrolepis exaltata", "Bathroom", 250, 3, 1),
    ("Snake plant", "Dracaena trifasciata", "Bedroom", 300, 14, 5),
    ("Basil", "Ocimum basilicum", "Kitchen", 150, 2, 3),
]


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        users = UserService(UserRepositoryImpl(session))
        existing = await users.get_user_by_email(DEMO_EMAIL)
        if existing:
            await users.delete_account(existing.id)
            print(f"Removed previous demo user {DEMO_EMAIL}")

        user = await users.create_user(
            email=DEMO_EMAIL,
            password_hash=get_password_hash(DEMO_PASSWORD),
            firstname="Demo",
            lastname="Gardener",
        )
        plant_repo = PlantRepositoryImpl(session)
        watering_repo = WateringRepositoryImpl(session)
        plants = PlantService(plant_repo, watering_repo, tz=settings.schedule_tz)
        waterings = WateringService(watering_repo, plant_repo, tz=settings.schedule_tz)

        now = utcnow()
        for name, species, location, amount, frequency, days_ago in DEMO_PLANTS:
            plant = await plants.create_plant(
                user.id,
                name=name,
                water_amount_ml=amount,
                water_frequency_days=frequency,
                species=species,
                location=location,
                now=now - timedelta(days=30),
            )
            # A few past waterings, the last one days_ago days back
            for back in (days_ago + 2 * frequency, days_ago + frequency, days_ago):
                await waterings.record_watering(
                    user.id, plant.id, amount, watered_at=now - timedelta(days=back), now=now
                )
            print(f"  {name}: every {frequency} days, last watered {days_ago} days ago")

        print(f"Seeded {len(DEMO_PLANTS)} plants for {DEMO_EMAIL} (password: {DEMO_PASSWORD})")


async def main() -> None:
    try:
        await seed()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
