"""
Tests for settings resolution, logging setup and allocator wiring.
"""

from __future__ import annotations

import logging

import pytest
import structlog

from app.allocation import HiLoAllocator, SqlHighValueStore
from app.core.config import Settings
from app.core.logging import get_logger, setup_logging
from app.main import build_allocator


class TestSettings:
    """Derived settings properties."""

    def test_postgres_urls_from_parts(self):
        settings = Settings(
            POSTGRES_USER="u",
            POSTGRES_PASSWORD="p",
            POSTGRES_SERVER="db",
            POSTGRES_PORT=5433,
            POSTGRES_DB="users",
            DATABASE_URL_OVERRIDE="",
        )

        assert settings.DATABASE_URL == "postgresql+asyncpg://u:p@db:5433/users"
        assert settings.DATABASE_URL_SYNC == "postgresql://u:p@db:5433/users"

    def test_override_wins(self):
        settings = Settings(DATABASE_URL_OVERRIDE="sqlite+aiosqlite:///./dev.db")

        assert settings.DATABASE_URL == "sqlite+aiosqlite:///./dev.db"
        assert settings.DATABASE_URL_SYNC == "sqlite:///./dev.db"

    @pytest.mark.parametrize(
        "env,level,expected",
        [
            ("development", "", "DEBUG"),
            ("production", "", "INFO"),
            ("production", "warning", "WARNING"),
        ],
    )
    def test_effective_log_level(self, env, level, expected):
        assert Settings(APP_ENV=env, LOG_LEVEL=level).effective_log_level == expected

    def test_hilo_defaults(self):
        settings = Settings()
        assert settings.HILO_MAX_LO == 1000
        assert settings.HILO_INITIAL_HIGH == 1

    def test_max_lo_must_be_positive(self):
        with pytest.raises(ValueError):
            Settings(HILO_MAX_LO=0)


class TestLogging:
    """setup_logging() routes structlog through stdlib handlers."""

    def setup_method(self):
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def teardown_method(self):
        root = logging.getLogger()
        root.handlers[:] = self._handlers
        root.setLevel(self._level)
        structlog.reset_defaults()

    def test_console_output(self, capsys):
        setup_logging("INFO")
        get_logger("test").info("High value claimed", block_name="users", high=3)

        err = capsys.readouterr().err
        assert "High value claimed" in err
        assert "block_name" in err

    def test_json_output_and_level_filter(self, capsys):
        setup_logging("WARNING", json_logs=True)
        log = get_logger("test")
        log.info("hidden")
        log.warning("shown", attempt=2)

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert '"event": "shown"' in err
        assert '"attempt": 2' in err


def test_build_allocator_uses_settings():
    allocator = build_allocator()

    assert isinstance(allocator, HiLoAllocator)
    assert isinstance(allocator.store, SqlHighValueStore)
    assert allocator.max_lo == 1000
    assert allocator.store.initial_high == 1
