"""User endpoints — one database operation each, plain-text responses."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.allocation import HiLoAllocator
from app.api.deps import get_allocator, get_db
from app.core.constants import MAX_USER_ID
from app.core.errors import NotFoundError
from app.repositories import users as user_repository

router = APIRouter(tags=["Users"], default_response_class=PlainTextResponse)


@router.get("/create")
async def create_user(
    email: str = Query(...),
    name: str = Query(...),
    db: AsyncSession = Depends(get_db),
    allocator: HiLoAllocator = Depends(get_allocator),
) -> str:
    """Allocate an id and persist a new user."""
    user = await user_repository.create_user(db, allocator, email=email, name=name)
    return f"User successfully created with id = {user.id}"


@router.get("/delete")
async def delete_user(
    user_id: int = Query(..., alias="id", ge=0, le=MAX_USER_ID),
    db: AsyncSession = Depends(get_db),
) -> str:
    """Remove a user by id."""
    if not await user_repository.delete_user(db, user_id):
        raise NotFoundError(f"User {user_id} not found", entity="User", key=user_id)
    return "User successfully deleted!"


@router.get("/get-by-email")
async def get_by_email(
    email: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> str:
    """Return the id of the user with the given email."""
    user = await user_repository.get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("User not found", entity="User", key=email)
    return f"The user id is: {user.id}"


@router.get("/update")
async def update_user(
    user_id: int = Query(..., alias="id", ge=0, le=MAX_USER_ID),
    email: str = Query(...),
    name: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> str:
    """Replace a user's email and name."""
    user = await user_repository.update_user(db, user_id, email=email, name=name)
    if user is None:
        raise NotFoundError(f"User {user_id} not found", entity="User", key=user_id)
    return "User successfully updated!"
