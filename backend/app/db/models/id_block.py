"""
IdBlock model — persisted high-value counter for the HiLo allocator.

One row per named sequence.  `next_high` is only ever advanced through a
conditional UPDATE (compare-and-swap), so every value is claimed by at
most one allocator instance.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class IdBlock(Base):
    __tablename__ = "id_generation"

    block_name: Mapped[str] = mapped_column(String(64), primary_key=True)
    next_high: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<IdBlock {self.block_name} next_high={self.next_high}>"
