#!/usr/bin/env python3
"""Migrate the database and load demo catalog data for the Ocean Tours API."""

import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from ocean_tours.core.database import async_session_factory, close_db  # noqa: E402
from ocean_tours.models import Location, MarineLife, Schedule, Tour, TourType  # noqa: E402
from ocean_tours.models.tour import Difficulty  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_migrations() -> None:
    """Apply every Alembic revision up to head."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data() -> None:
    """Insert reference data and one published tour unless tours already exist."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing = await db.scalar(select(func.count()).select_from(Tour))
        if existing:
            logger.info("Sample data already exists, skipping...")
            return

        try:
            wharf = Location(name="Kaikoura Wharf", latitude=-42.4192, longitude=173.7008)
            safari = TourType(name="Ocean Safari", description="Open-water wildlife cruises")
            sperm_whale = MarineLife(
                name="Sperm Whale",
                slug="sperm-whale",
                scientific_name="Physeter macrocephalus",
                animal_type="Mammal",
                seasons=["Summer", "Autumn", "Winter", "Spring"],
                expeditions=["Whale Watching"],
                active_months=list(range(1, 13)),
            )
            dusky = MarineLife(
                name="Dusky Dolphin",
                slug="dusky-dolphin",
                scientific_name="Lagenorhynchus obscurus",
                animal_type="Mammal",
                seasons=["Summer", "Autumn"],
                expeditions=["Whale Watching", "Dolphin Swim"],
                active_months=[11, 12, 1, 2, 3, 4],
            )
            db.add_all([wharf, safari, sperm_whale, dusky])
            await db.flush()

            tour = Tour(
                name="Kaikoura Whale Safari",
                description=(
                    "A three hour cruise over the Kaikoura Canyon looking for resident sperm whales "
                    "and the large dusky dolphin pods that feed along the shelf."
                ),
                difficulty=Difficulty.EASY.value,
                duration=3,
                base_price=Decimal("150.00"),
                max_participants=40,
                published=True,
                highlights=["Sperm whales year round", "Dolphin pods", "Albatross fly-bys"],
                inclusions=["Professional guide", "Safety equipment"],
                exclusions=["Transportation to departure point"],
                seasons=["Summer", "Autumn", "Winter", "Spring"],
                expedition_type="Whale Watching",
                marine_area="Kaikoura Canyon",
                departure_port="Kaikoura Wharf",
                conservation_info="Vessels keep the regulated distance and time limits around whales.",
                tour_type_id=safari.id,
                start_location_id=wharf.id,
                end_location_id=wharf.id,
                location_id=wharf.id,
            )
            tour.marine_life = [sperm_whale, dusky]
            tour.marine_life_names = [sperm_whale.name, dusky.name]
            db.add(tour)
            await db.flush()

            base_date = datetime.now(timezone.utc).replace(hour=9, minute=0, second=0, microsecond=0) + timedelta(days=30)
            for i in range(5):
                start = base_date + timedelta(days=i * 7)
                db.add(Schedule(
                    tour_id=tour.id,
                    start_date=start,
                    end_date=start + timedelta(hours=3),
                    available_spots=tour.max_participants,
                ))

            await db.commit()
            logger.info("Sample data created successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise


async def seed() -> None:
    try:
        await create_sample_data()
    finally:
        await close_db()


def main() -> None:
    """Main setup function."""
    logger.info("Starting Ocean Tours API setup...")

    # env.py drives its own event loop, so migrate before entering ours
    run_migrations()
    asyncio.run(seed())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn ocean_tours.main:app --reload")


if __name__ == "__main__":
    main()
