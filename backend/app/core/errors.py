"""
Domain-specific exception hierarchy.

All application exceptions inherit from AppError so callers can catch
broadly or narrowly as needed.  Each exception carries an HTTP status
code and structured context (block name, entity key, etc.) for the
API error handler and for logging.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppError):
    """A required field is missing or blank.  Never retried."""

    status_code = 400

    def __init__(self, message: str, *, field: str | None = None, **kwargs) -> None:
        self.field = field
        super().__init__(message, **kwargs)


class NotFoundError(AppError):
    """Lookup, update or delete target does not exist."""

    status_code = 404

    def __init__(
        self,
        message: str,
        *,
        entity: str | None = None,
        key: Any = None,
        **kwargs,
    ) -> None:
        self.entity = entity
        self.key = key
        super().__init__(message, **kwargs)


class AllocationError(AppError):
    """Claiming a new high value failed after all retry attempts."""

    status_code = 503

    def __init__(
        self,
        message: str,
        *,
        block_name: str | None = None,
        attempts: int = 0,
        **kwargs,
    ) -> None:
        self.block_name = block_name
        self.attempts = attempts
        super().__init__(message, **kwargs)


class StoreUnavailableError(AppError):
    """The backing store could not be reached.  Not retried automatically."""

    status_code = 503
