"""Admin seed script for the Posterhub API.

Creates the default admin account if it doesn't exist. Idempotent and safe
to run on every container start.
"""

import asyncio
import logging
from sqlalchemy import select

from app.database import AsyncSessionLocal
from app.models.user import User
from app.auth.security import hash_password
from app.config import settings
from app.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def seed_admin(session_factory=AsyncSessionLocal) -> bool:
    """Create the default admin user. Returns True if one was created."""
    async with session_factory() as session:
        result = await session.execute(
            select(User).where(User.email == settings.ADMIN_EMAIL.lower())
        )
        if result.scalar_one_or_none():
            logger.info("Admin user already exists, skipping")
            return False

        admin_user = User(
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL.lower(),
            password_hash=hash_password(settings.ADMIN_PASSWORD),
            user_role="admin",
            status="active",
            approved=True,
        )

        session.add(admin_user)
        await session.commit()

        logger.info(f"Admin user created: {settings.ADMIN_EMAIL}")
        return True


def main():
    """Entry point for the seed script."""
    setup_logging()
    asyncio.run(seed_admin())


if __name__ == "__main__":
    main()
