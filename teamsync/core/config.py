# teamsync/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime. They control:
    - which persistence backend the workspace talks to
    - whether an empty team is seeded with demo members on first load
    - the internal API key protecting /internal endpoints
    - log verbosity
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "TeamSync"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")

    GATEWAY_BACKEND: str = Field(
        "sql",
        description=(
            "Persistence backend used by the workspace: 'sql' for the SQLAlchemy "
            "document table, 'memory' for an in-process store (dev/tests)."
        ),
    )

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./teamsync.db",
        description="SQLAlchemy-compatible async database URL",
    )

    SEED_DEMO_DATA: bool = Field(
        default=True,
        description="Seed demo team members on first load when the team is empty.",
    )

    INTERNAL_API_KEY: str | None = Field(
        default=None,
        description="API key required for hitting /internal endpoints",
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ...).",
    )
    LOG_FORMAT: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        description="Format string passed to logging.basicConfig.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Settings are read and validated only once per process.
    """
    return Settings()
