# teamsync/main.py
import logging
from typing import Optional

from fastapi import FastAPI

from teamsync.api.routes import (
    attendance,
    data,
    feed,
    health,
    internal,
    notes,
    projects,
    session,
    settings as settings_routes,
    team,
    worklogs,
)
from teamsync.core.config import get_settings
from teamsync.core.logging import configure_logging
from teamsync.services.bootstrap import BootstrapError
from teamsync.services.workspace import Workspace

logger = logging.getLogger(__name__)


def create_app(workspace: Optional[Workspace] = None) -> FastAPI:
    """
    Application factory for the TeamSync service.

    `workspace` lets callers (tests, embedding code) supply a prebuilt
    workspace; otherwise one is built from settings at startup.
    """
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "State and synchronization core of the TeamSync team-operations app:\n"
            "projects, attendance, notes, work logs, team administration and CSV\n"
            "import/export. Every write is persisted first and applied to the\n"
            "in-memory workspace only after the backend accepted it."
        ),
        version="0.1.0",
    )
    app.state.workspace = workspace
    app.state.bootstrap_error = None

    # Routers
    app.include_router(health.router)
    app.include_router(session.router)
    app.include_router(projects.router)
    app.include_router(attendance.router)
    app.include_router(notes.router)
    app.include_router(worklogs.router)
    app.include_router(team.router)
    app.include_router(settings_routes.router)
    app.include_router(feed.router)
    app.include_router(data.router)
    app.include_router(internal.router)

    @app.on_event("startup")
    async def on_startup() -> None:
        if app.state.workspace is None:
            app.state.workspace = Workspace.from_settings(settings)
        try:
            await app.state.workspace.start()
        except BootstrapError as exc:
            # Keep serving /health and /internal/reload; data routes answer 503.
            logger.error("Initial load failed: %s", exc)
            app.state.bootstrap_error = exc

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if app.state.workspace is not None:
            await app.state.workspace.close()

    return app


app = create_app()
