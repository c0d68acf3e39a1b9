"""
High-value store — the persistent half of the HiLo allocator.

The allocator only needs two operations from storage: read the current
`next_high` of a block, and advance it with an atomic compare-and-swap.
`SqlHighValueStore` implements them against the `id_generation` table,
each call in its own short transaction so a claim is committed
independently of whatever request transaction triggered it.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import StoreUnavailableError
from app.core.logging import get_logger
from app.db.models.id_block import IdBlock

logger = get_logger(__name__)

_UNAVAILABLE = (OperationalError, InterfaceError, OSError)


class HighValueStore(Protocol):
    """Storage operations the HiLo allocator depends on."""

    async def read(self, block_name: str) -> int:
        """Return the persisted next_high, creating the block if needed."""
        ...

    async def compare_and_swap(self, block_name: str, expected: int, new: int) -> bool:
        """Set next_high to `new` iff it is still `expected`."""
        ...


class SqlHighValueStore:
    """HighValueStore backed by the `id_generation` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        initial_high: int = 1,
    ) -> None:
        self.session_factory = session_factory
        self.initial_high = initial_high

    async def read(self, block_name: str) -> int:
        try:
            async with self.session_factory() as session:
                block = await session.get(IdBlock, block_name)
                if block is not None:
                    return block.next_high

                session.add(IdBlock(block_name=block_name, next_high=self.initial_high))
                try:
                    await session.commit()
                except IntegrityError:
                    # Another process created the row first
                    await session.rollback()
                    block = await session.get(IdBlock, block_name, populate_existing=True)
                    return block.next_high

                logger.info(
                    "Id block created",
                    block_name=block_name,
                    next_high=self.initial_high,
                )
                return self.initial_high
        except _UNAVAILABLE as exc:
            raise StoreUnavailableError(
                f"Id store unreachable while reading block '{block_name}'",
                details={"error": str(exc)},
            ) from exc

    async def compare_and_swap(self, block_name: str, expected: int, new: int) -> bool:
        stmt = (
            update(IdBlock)
            .where(IdBlock.block_name == block_name, IdBlock.next_high == expected)
            .values(next_high=new)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return result.rowcount == 1
        except _UNAVAILABLE as exc:
            raise StoreUnavailableError(
                f"Id store unreachable while claiming block '{block_name}'",
                details={"error": str(exc)},
            ) from exc
