# teamsync/services/workspace.py
from __future__ import annotations

import logging
from typing import Callable, MutableMapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from teamsync.core.config import Settings
from teamsync.db.session import build_engine, build_sessionmaker, init_db
from teamsync.schemas.activity import ActivityType
from teamsync.schemas.base import Collection, utc_now_iso
from teamsync.schemas.session import Theme, View
from teamsync.schemas.team_member import TeamMember
from teamsync.schemas.view import ViewSnapshot
from teamsync.services.bootstrap import BootstrapError, Bootstrapper
from teamsync.services.coordinator import MutationCoordinator
from teamsync.services.gateway import InMemoryGateway, PersistenceGateway
from teamsync.services.notifications import NotificationCenter
from teamsync.services.session_state import SessionState
from teamsync.services.sql_gateway import SqlDocumentGateway
from teamsync.services.store import EntityStore
from teamsync.services.view import SnapshotRenderer, ViewRenderer

logger = logging.getLogger(__name__)


class Workspace:
    """
    One isolated application state: store, coordinator, session, renderer.

    Nothing here is process-global; two workspaces never share state, which
    is what lets every test build its own.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        renderer: Optional[ViewRenderer] = None,
        session_scope: Optional[MutableMapping[str, str]] = None,
        local_scope: Optional[MutableMapping[str, str]] = None,
        seed_demo_data: bool = True,
        engine: Optional[AsyncEngine] = None,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.gateway = gateway
        self.store = EntityStore()
        self.session = SessionState(session_scope, local_scope)
        self.notifications = NotificationCenter()
        self.renderer = renderer or SnapshotRenderer()
        self.seed_demo_data = seed_demo_data
        self.engine = engine
        self.bootstrapper = Bootstrapper(gateway, self.store, self.session, self.renderer)
        self.coordinator = MutationCoordinator(
            gateway,
            self.store,
            self.session,
            self.notifications,
            self.renderer,
            reload=self.bootstrapper.reload,
            clock=clock,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Workspace":
        """
        Build a workspace on the backend selected by GATEWAY_BACKEND.
        """
        backend = settings.GATEWAY_BACKEND.lower()
        if backend == "memory":
            return cls(InMemoryGateway(), seed_demo_data=settings.SEED_DEMO_DATA)
        if backend == "sql":
            engine = build_engine(settings.DB_URL)
            gateway = SqlDocumentGateway(build_sessionmaker(engine))
            return cls(gateway, seed_demo_data=settings.SEED_DEMO_DATA, engine=engine)
        raise ValueError(f"Unknown GATEWAY_BACKEND '{settings.GATEWAY_BACKEND}'")

    async def start(self) -> None:
        """
        Prepare the backend and run the initial load.
        """
        if self.engine is not None:
            try:
                await init_db(self.engine)
            except SQLAlchemyError as exc:
                logger.exception("Could not prepare the document table")
                raise BootstrapError(f"Could not prepare the database: {exc}") from exc
        await self.bootstrapper.load(seed_if_empty=self.seed_demo_data)

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()

    # ------------------------------------------------------------------
    # session
    # ------------------------------------------------------------------

    @property
    def current_user(self) -> Optional[TeamMember]:
        user_id = self.session.saved_user_id
        if not user_id:
            return None
        return self.store.get(Collection.TEAM_MEMBERS, user_id)  # type: ignore[return-value]

    @property
    def snapshot(self) -> Optional[ViewSnapshot]:
        return getattr(self.renderer, "latest", None)

    def render(self) -> None:
        self.renderer.render(self.store, self.session)

    async def login(self, email: str) -> TeamMember:
        """
        Log in by email (case-insensitive) and append a login activity.

        Raises LookupError when no member has that email.
        """
        wanted = email.strip().lower()
        member = next(
            (m for m in self.store.team_members if (m.email or "").strip().lower() == wanted),
            None,
        )
        if member is None:
            raise LookupError("No team member with that email address.")

        self.session.save_user(member.id)
        await self.coordinator.record_activity(ActivityType.LOGIN, user_id=member.id)
        logger.info("User %s logged in", member.id)
        self.render()
        return member

    def logout(self) -> None:
        self.session.save_user(None)
        self.render()

    def switch_user(self, member_id: str) -> TeamMember:
        member = self.store.get(Collection.TEAM_MEMBERS, member_id)
        if member is None:
            raise LookupError(f"Team member '{member_id}' not found")
        self.session.save_user(member.id)
        self.render()
        return member  # type: ignore[return-value]

    def set_view(self, view: View) -> None:
        self.session.save_view(view)
        self.render()

    def set_theme(self, theme: Theme) -> None:
        self.session.save_theme(theme)
        self.render()
