"""Seed script to populate database with sample data."""

import asyncio
import logging

from sqlalchemy import select

from portal.db import get_db_context, init_db
from portal.logging_config import configure_logging
from portal.models import ApplicationStatus, TeamStatus, User, UserRole, VolunteerTeam
from portal.services.password import hash_password

logger = logging.getLogger("seed")


async def seed_database():
    """Seed the database with staff accounts and one submitted team."""
    await init_db()

    async with get_db_context() as session:
        existing = await session.execute(select(User).limit(1))
        if existing.scalar_one_or_none():
            logger.info("Database already seeded. Skipping.")
            return

        founder = User(
            email="founder@example.org",
            name="Fran Founder",
            role=UserRole.FOUNDER.value,
            hashed_password=hash_password("password123"),
            is_verified=True,
        )
        intern = User(
            email="intern@example.org",
            name="Ivan Intern",
            role=UserRole.INTERN.value,
            department="volunteer_development",
            hashed_password=hash_password("password123"),
            is_verified=True,
        )
        session.add_all([founder, intern])
        await session.flush()
        logger.info(f"Created staff accounts: {founder.email}, {intern.email}")

        team = VolunteerTeam(
            team_name="Solar Sprouts",
            email="ana@example.org",
            primary_contact_phone="555-0100",
            group_members=[
                {"name": "Ana Alvarez", "email": "ana@example.org", "phone": "555-0100", "school": "Lincoln High"},
                {"name": "Ben Brooks", "email": "ben@example.org", "phone": "555-0101", "school": "Lincoln High"},
                {"name": "Cy Chen", "email": "cy@example.org", "phone": "555-0102", "school": "Lincoln High"},
            ],
            application_status=ApplicationStatus.SUBMITTED.value,
            status=TeamStatus.PENDING.value,
        )
        session.add(team)
        await session.flush()
        logger.info(f"Created submitted team application {team.id}: {team.team_name}")

    logger.info("Seeding complete. Staff password: password123")


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed_database())
