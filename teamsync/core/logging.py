# teamsync/core/logging.py
import logging

from teamsync.core.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure root logging once for the process.

    Modules log through `logging.getLogger(__name__)`; this only sets the
    level and line format.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=settings.LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
