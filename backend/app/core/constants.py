"""Shared constants and enums used across the application."""

from enum import StrEnum


class IdBlockName(StrEnum):
    """Named identifier sequences, one high-value counter row each."""

    USERS = "users"


# Columns of the users table a caller may look a record up by
USER_LOOKUP_FIELDS = frozenset({"id", "email", "name"})

# Largest value a BIGINT id column can hold
MAX_USER_ID = 2**63 - 1
