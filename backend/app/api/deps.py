"""Shared dependencies for API routes."""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.allocation import HiLoAllocator
from app.db.session import get_db as _get_db


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session."""
    async for session in _get_db():
        yield session


def get_allocator(request: Request) -> HiLoAllocator:
    """Return the process-wide HiLo allocator created at startup."""
    return request.app.state.id_allocator
