"""
User model — one row of user data, validated before persistence.

The primary key is never generated by the database: it is assigned once,
at first save, by the HiLo allocator (block "users") and never changes.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.errors import ValidationError
from app.db.models.base import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __init__(
        self,
        email: Optional[str] = None,
        name: Optional[str] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id=id, email=email, name=name)

    def validate(self) -> None:
        """Raise ValidationError when email or name is missing or blank."""
        for field in ("email", "name"):
            value = getattr(self, field)
            if value is None or not str(value).strip():
                raise ValidationError(f"User {field} must not be empty", field=field)

    def __repr__(self) -> str:
        return f"<User id={self.id} {self.email} name={self.name!r}>"
