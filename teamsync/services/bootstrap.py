# teamsync/services/bootstrap.py
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from teamsync.schemas.app_settings import (
    INITIAL_INTERNAL_TEAMS,
    SETTINGS_DOC_ID,
    AppSettings,
    default_app_settings,
)
from teamsync.schemas.base import Collection, new_id
from teamsync.schemas.team_member import TeamMember, TeamMemberRole, assign_display_colors
from teamsync.services.gateway import GatewayError, PersistenceGateway
from teamsync.services.session_state import SessionState
from teamsync.services.store import RECORD_TYPES, EntityStore
from teamsync.services.view import ViewRenderer

logger = logging.getLogger(__name__)

# Order in which collections are fetched; settings come last.
LOAD_ORDER: Tuple[Collection, ...] = (
    Collection.PROJECTS,
    Collection.ATTENDANCE,
    Collection.NOTES,
    Collection.TEAM_MEMBERS,
    Collection.WORK_LOGS,
    Collection.ACTIVITIES,
    Collection.SETTINGS,
)


class BootstrapError(RuntimeError):
    """
    The initial (or reconciliation) load failed. No partial state is shown.
    """


def apply_settings_defaults(raw: Optional[Dict[str, Any]]) -> Tuple[AppSettings, bool]:
    """
    Fill missing settings keys from the default table and migrate legacy shapes.

    Returns the settings record and whether anything was filled or migrated
    (in which case the caller persists it back).
    """
    defaults = default_app_settings()
    data = {k: v for k, v in (raw or {}).items() if k != "id"}
    changed = False

    for key, value in defaults.items():
        if key not in data or data[key] is None:
            data[key] = value
            changed = True

    # Older documents stored work log tasks as plain names.
    tasks = data.get("workLogTasks") or []
    if any(isinstance(task, str) for task in tasks):
        teams = list(data.get("internalTeams") or INITIAL_INTERNAL_TEAMS)
        data["workLogTasks"] = [
            {"id": new_id(), "name": task, "category": "General", "teams": teams}
            if isinstance(task, str)
            else task
            for task in tasks
        ]
        changed = True

    return AppSettings.model_validate({**data, "id": SETTINGS_DOC_ID}), changed


def build_demo_members(today: Optional[date] = None) -> List[TeamMember]:
    """
    The five demo members written to an empty team on first start.

    The first member is a Manager; the rest alternate between the first two
    internal teams.
    """
    today = today or date.today()
    teams = INITIAL_INTERNAL_TEAMS
    members = []
    for i in range(5):
        is_manager = i == 0
        if is_manager:
            designation = "Project Manager"
        elif i % 2 == 0:
            designation = "Software Engineer"
        else:
            designation = "QA Analyst"
        try:
            join_date = today.replace(year=today.year - i)
        except ValueError:
            # 29 February in a non-leap year
            join_date = today.replace(year=today.year - i, day=28)
        members.append(
            TeamMember(
                name=f"Team Member {i + 1}",
                email=f"member{i + 1}@example.com",
                employee_id=f"EMP00{i + 1}",
                join_date=join_date.isoformat(),
                birth_date=date(1990 + i, (i % 12) + 1, (i * 5 % 28) + 1).isoformat(),
                designation=designation,
                department="Engineering" if i < 3 else "Quality Assurance",
                company="TeamSync Corp",
                role=TeamMemberRole.MANAGER if is_manager else TeamMemberRole.MEMBER,
                internal_team=teams[0] if is_manager or i % 2 == 0 else teams[1],
            )
        )
    return members


class Bootstrapper:
    """
    Loads every collection from the gateway into the store.

    Used once at startup and again as the reconciliation step after a
    partial cascade failure or an import.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        store: EntityStore,
        session: SessionState,
        renderer: ViewRenderer,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.session = session
        self.renderer = renderer

    async def load(self, seed_if_empty: bool = True) -> None:
        try:
            await self._load(seed_if_empty)
        except (GatewayError, ValidationError) as exc:
            logger.exception("Failed to load data from the persistence gateway")
            raise BootstrapError(f"Could not load application data: {exc}") from exc

    async def reload(self) -> None:
        await self.load(seed_if_empty=False)

    async def _load(self, seed_if_empty: bool) -> None:
        results = await asyncio.gather(
            *(self.gateway.get_collection(c.value) for c in LOAD_ORDER)
        )
        raw: Dict[Collection, List[Dict[str, Any]]] = dict(zip(LOAD_ORDER, results))

        settings_doc = next(
            (doc for doc in raw[Collection.SETTINGS] if doc.get("id") == SETTINGS_DOC_ID),
            None,
        )
        settings, changed = apply_settings_defaults(settings_doc)
        if changed:
            logger.info("Settings document incomplete; writing defaults back")
            await self.gateway.set_document(
                Collection.SETTINGS.value, SETTINGS_DOC_ID, settings.to_document()
            )

        member_docs = raw[Collection.TEAM_MEMBERS]
        if seed_if_empty and not member_docs:
            logger.info("No team members found; seeding demo members")
            await self.gateway.batch_write(
                Collection.TEAM_MEMBERS.value,
                [{"id": m.id, **m.to_document()} for m in build_demo_members()],
            )
            member_docs = await self.gateway.get_collection(Collection.TEAM_MEMBERS.value)

        migrated = 0
        for doc in member_docs:
            if not doc.get("role"):
                doc["role"] = TeamMemberRole.MEMBER.value
                migrated += 1
        if migrated:
            logger.info("Defaulted role to Member for %d team member(s)", migrated)

        members = assign_display_colors(
            [TeamMember.from_document(doc) for doc in member_docs]
        )

        self.store.settings = settings
        for collection, record_type in RECORD_TYPES.items():
            if collection == Collection.TEAM_MEMBERS:
                self.store.replace_all(collection, members)
            else:
                self.store.replace_all(
                    collection, [record_type.from_document(doc) for doc in raw[collection]]
                )

        saved = self.session.saved_user_id
        if saved and self.store.get(Collection.TEAM_MEMBERS, saved) is None:
            logger.info("Saved user %s no longer exists; login required", saved)
            self.session.save_user(None)

        self.renderer.render(self.store, self.session)
