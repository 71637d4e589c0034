from __future__ import annotations

import logging

from pymongo import ASCENDING, DESCENDING

from tourbook import config
from tourbook.auth import hash_password
from tourbook.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


async def ensure_indexes(db) -> None:
    await db.users.create_index("email", unique=True)
    await db.bookings.create_index("bookingReference", unique=True)
    await db.bookings.create_index([("user", ASCENDING), ("createdAt", DESCENDING)])
    await db.bookings.create_index([("tourPackage", ASCENDING), ("status", ASCENDING)])
    await db.tours.create_index([("createdAt", DESCENDING)])


async def ensure_bootstrap_admin(db) -> None:
    """Create the admin account named by BOOTSTRAP_ADMIN_* if it is missing."""

    email = config.BOOTSTRAP_ADMIN_EMAIL.strip().lower()
    if not email or not config.BOOTSTRAP_ADMIN_PASSWORD:
        return

    repo = UserRepository(db)
    existing = await repo.get_by_email(email)
    if existing:
        if existing.get("role") != "admin":
            logger.warning("Bootstrap admin %s exists without admin role; leaving it unchanged", email)
        return

    await repo.create(
        name=config.BOOTSTRAP_ADMIN_NAME,
        email=email,
        password_hash=hash_password(config.BOOTSTRAP_ADMIN_PASSWORD),
        role="admin",
    )
    logger.info("Created bootstrap admin %s", email)


async def ensure_seed_data(db) -> None:
    await ensure_indexes(db)
    await ensure_bootstrap_admin(db)
