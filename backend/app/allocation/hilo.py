"""
HiLoAllocator — table-based high/low identifier generation.

Each named block keeps an in-memory (high, low) pair.  Ids are issued as
``high * max_lo + low`` without touching storage; only when ``low``
reaches ``max_lo`` (or on first use) is a new high value claimed from the
store with a compare-and-swap.  The unused remainder of a block is lost
when the process stops, so ids are unique and increasing but not
contiguous across restarts.

Usage::

    allocator = HiLoAllocator(SqlHighValueStore(async_session), max_lo=1000)
    user_id = await allocator.next_id("users")
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from app.allocation.store import HighValueStore
from app.core.errors import AllocationError
from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class BlockState:
    """In-memory position inside the currently claimed block."""

    high: int
    low: int = 0


class HiLoAllocator:
    """Issues unique ids per block, claiming high values from a HighValueStore."""

    def __init__(
        self,
        store: HighValueStore,
        max_lo: int = 1000,
        max_attempts: int = 5,
        backoff_base_seconds: float = 0.05,
    ) -> None:
        if max_lo < 1:
            raise ValueError("max_lo must be >= 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self.store = store
        self.max_lo = max_lo
        self.max_attempts = max_attempts
        self.backoff_base_seconds = backoff_base_seconds

        self._blocks: dict[str, BlockState] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def next_id(self, block_name: str) -> int:
        """Return a fresh id for `block_name`."""
        async with self._lock_for(block_name):
            state = self._blocks.get(block_name)
            if state is None or state.low >= self.max_lo:
                state = BlockState(high=await self._claim_high(block_name))
                self._blocks[block_name] = state

            new_id = state.high * self.max_lo + state.low
            state.low += 1
            return new_id

    def peek(self, block_name: str) -> tuple[int, int] | None:
        """Current (high, low) for a block, or None before its first claim."""
        state = self._blocks.get(block_name)
        if state is None:
            return None
        return state.high, state.low

    def reset(self) -> None:
        """Forget every claimed block; the next call per block claims afresh."""
        self._blocks.clear()

    def _lock_for(self, block_name: str) -> asyncio.Lock:
        lock = self._locks.get(block_name)
        if lock is None:
            lock = self._locks[block_name] = asyncio.Lock()
        return lock

    async def _claim_high(self, block_name: str) -> int:
        """
        Atomically read-and-increment the persisted next_high.

        CAS conflicts are retried with exponential backoff; StoreUnavailableError
        from the store propagates untouched.
        """
        log = logger.bind(block_name=block_name)

        for attempt in range(1, self.max_attempts + 1):
            current = await self.store.read(block_name)
            if await self.store.compare_and_swap(block_name, current, current + 1):
                log.info("High value claimed", high=current, attempt=attempt)
                return current

            if attempt < self.max_attempts:
                wait_seconds = self.backoff_base_seconds * 2 ** (attempt - 1)
                log.warning(
                    f"High value conflict (attempt {attempt}/{self.max_attempts}), retrying in {wait_seconds}s",
                    expected=current,
                )
                await asyncio.sleep(wait_seconds)

        log.error("High value claim exhausted", attempts=self.max_attempts)
        raise AllocationError(
            f"Could not claim a high value for block '{block_name}' after {self.max_attempts} attempts",
            block_name=block_name,
            attempts=self.max_attempts,
        )
