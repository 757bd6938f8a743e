#!/usr/bin/env python3
"""Setup script for the travel booking API: migrate and seed."""

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

from travel_api.core.database import async_session_factory, close_db  # noqa: E402
from travel_api.core.security import hash_password  # noqa: E402
from travel_api.models import TravelPackage, User, UserRole  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@travel.com"
ADMIN_PASSWORD = "admin123"


def setup_database():
    """Bring the database schema up to the latest migration."""
    logger.info("Setting up database...")

    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data():
    """Create the administrator account and two sample packages."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing_users = await db.execute(select(func.count(User.id)))
            if existing_users.scalar() > 0:
                logger.info("Sample data already exists, skipping...")
                return

            db.add(User(
                email=ADMIN_EMAIL,
                first_name="Admin",
                last_name="User",
                password_hash=hash_password(ADMIN_PASSWORD),
                role=UserRole.ADMIN.value,
                is_active=True,
            ))

            today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
            samples = [
                {
                    "title": "Paris City Break",
                    "description": "Explore the City of Light with guided tours of the Louvre and Eiffel Tower",
                    "destination": "Paris, France",
                    "price": Decimal("899.99"),
                    "duration": 4,
                    "capacity": 20,
                    "starts_in": 30,
                },
                {
                    "title": "Tokyo Discovery",
                    "description": "Experience the blend of tradition and modernity in Japan's capital",
                    "destination": "Tokyo, Japan",
                    "price": Decimal("1299.99"),
                    "duration": 7,
                    "capacity": 15,
                    "starts_in": 45,
                },
            ]
            for sample in samples:
                start_date = today + timedelta(days=sample["starts_in"])
                db.add(TravelPackage(
                    title=sample["title"],
                    description=sample["description"],
                    destination=sample["destination"],
                    price=sample["price"],
                    duration=sample["duration"],
                    start_date=start_date,
                    end_date=start_date + timedelta(days=sample["duration"]),
                    max_capacity=sample["capacity"],
                    available_slots=sample["capacity"],
                    is_active=True,
                ))

            await db.commit()
            logger.info("Sample data created successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise

    await close_db()


def main():
    """Main setup function."""
    logger.info("Starting travel booking API setup...")

    # Alembic's env.py drives its own event loop, so migrate before seeding
    setup_database()
    asyncio.run(create_sample_data())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn travel_api.main:app --reload")


if __name__ == "__main__":
    main()
