"""
Identifier allocation — HiLo allocator and its persistent high-value store.
"""

from app.allocation.hilo import BlockState, HiLoAllocator
from app.allocation.store import HighValueStore, SqlHighValueStore

__all__ = [
    "BlockState",
    "HiLoAllocator",
    "HighValueStore",
    "SqlHighValueStore",
]
