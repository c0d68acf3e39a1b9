"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # ── Database ──────────────────────────────
    POSTGRES_USER: str = "hilo_user"
    POSTGRES_PASSWORD: str = "hilo_pass"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "hilo_users_db"

    # Full async URL (e.g. sqlite+aiosqlite:///./dev.db); wins over POSTGRES_* when set
    DATABASE_URL_OVERRIDE: str = ""

    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    @property
    def DATABASE_URL(self) -> str:
        """Async URL for app runtime (asyncpg)."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def DATABASE_URL_SYNC(self) -> str:
        """Sync URL for Alembic migrations (psycopg2)."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE.replace("+aiosqlite", "").replace("+asyncpg", "")
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # ── HiLo identifier allocation ────────────
    HILO_MAX_LO: int = Field(default=1000, ge=1)
    HILO_INITIAL_HIGH: int = Field(default=1, ge=0)
    HILO_MAX_CLAIM_ATTEMPTS: int = Field(default=5, ge=1)
    HILO_BACKOFF_BASE_SECONDS: float = Field(default=0.05, ge=0.0)

    # ── Application ───────────────────────────
    APP_ENV: str = "development"
    LOG_LEVEL: str = ""
    LOG_JSON: bool = False

    @property
    def effective_log_level(self) -> str:
        """Explicit LOG_LEVEL, else DEBUG in development and INFO elsewhere."""
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        return "DEBUG" if self.APP_ENV == "development" else "INFO"

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
