"""
User repository containing all data-access operations for the users table.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
- Records are validated before any store call, and ids come from the
  HiLo allocator, never from the database
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.allocation import HiLoAllocator
from app.core.constants import USER_LOOKUP_FIELDS, IdBlockName
from app.core.logging import get_logger
from app.db.models.user import User

logger = get_logger(__name__)


async def save_user(db: AsyncSession, user: User, allocator: HiLoAllocator) -> int:
    """
    Persist a user and return its id.

    New records (id is None) get an id from the "users" block; existing
    records keep theirs and are updated in place, merging them into `db`
    when they were built or loaded outside this session.
    """
    user.validate()
    if user.id is None:
        user.id = await allocator.next_id(IdBlockName.USERS)
        db.add(user)
    elif user not in db:
        user = await db.merge(user)
    await db.flush()
    return user.id


async def create_user(
    db: AsyncSession,
    allocator: HiLoAllocator,
    *,
    email: str,
    name: str,
) -> User:
    """Validate, allocate an id and insert a new user."""
    user = User(email=email, name=name)
    await save_user(db, user, allocator)
    logger.info("User created", user_id=user.id, email=user.email)
    return user


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by primary key."""
    return await db.get(User, user_id)


async def get_user_by_field(db: AsyncSession, field: str, value: Any) -> User | None:
    """Fetch the first user (lowest id) whose `field` equals `value`."""
    if field not in USER_LOOKUP_FIELDS:
        raise ValueError(f"Unknown user field: {field!r}")
    stmt = (
        select(User)
        .where(getattr(User, field) == value)
        .order_by(User.id)
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email address (exact match)."""
    return await get_user_by_field(db, "email", email)


async def list_users(
    db: AsyncSession,
    *,
    offset: int = 0,
    limit: int = 50,
) -> list[User]:
    """List users in id order."""
    stmt = select(User).order_by(User.id).offset(offset).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_user(
    db: AsyncSession,
    user_id: int,
    *,
    email: str,
    name: str,
) -> User | None:
    """
    Replace email and name of an existing user.

    Last write wins: there is no version check, concurrent updates to the
    same row overwrite each other.
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        return None

    User(email=email, name=name).validate()
    user.email = email
    user.name = name
    await db.flush()
    return user


async def delete_user(db: AsyncSession, user_id: int) -> bool:
    """Hard-delete a user. Returns True if a row was deleted."""
    user = await get_user_by_id(db, user_id)
    if user is None:
        return False
    await db.delete(user)
    await db.flush()
    logger.info("User deleted", user_id=user_id)
    return True
