"""
Seed demo users for development.
Run: python -m scripts.seed_users  (from backend/)
"""

import asyncio

from app.core.config import settings
from app.core.constants import IdBlockName
from app.core.logging import get_logger, setup_logging
from app.db.session import async_session, init_models
from app.main import build_allocator
from app.repositories.users import create_user


SEED_USERS = [
    {"email": "ada@example.com", "name": "Ada Lovelace"},
    {"email": "alan@example.com", "name": "Alan Turing"},
    {"email": "grace@example.com", "name": "Grace Hopper"},
]


async def seed():
    """Insert seed users, allocating their ids through the HiLo allocator."""
    setup_logging(settings.effective_log_level, json_logs=settings.LOG_JSON)
    logger = get_logger("seed")

    await init_models()
    allocator = build_allocator()

    async with async_session() as session:
        for data in SEED_USERS:
            user = await create_user(session, allocator, **data)
            print(f"  Created user: {user.email} (id={user.id})")
        await session.commit()

    logger.info("Seed finished", users=len(SEED_USERS), block=allocator.peek(IdBlockName.USERS))
    print(f"Seeded {len(SEED_USERS)} users.")


if __name__ == "__main__":
    asyncio.run(seed())
