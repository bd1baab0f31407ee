# tests/test_bootstrap.py
from datetime import date

import pytest

from conftest import FailingGateway, MANAGER_ID, OTHER_ID
from teamsync.schemas.base import Collection
from teamsync.schemas.team_member import MEMBER_PALETTE, TeamMemberRole
from teamsync.services.bootstrap import BootstrapError, apply_settings_defaults, build_demo_members
from teamsync.services.workspace import Workspace


def test_settings_defaults_fill_missing_keys():
    settings, changed = apply_settings_defaults({"id": "app", "appName": "Ops"})

    assert changed
    assert settings.app_name == "Ops"
    assert settings.max_team_members == 20
    assert len(settings.work_log_tasks) == 9
    assert "Sick Leave" in settings.leave_types


def test_complete_settings_are_left_alone():
    settings, _ = apply_settings_defaults(None)
    again, changed = apply_settings_defaults(settings.to_public())

    assert not changed
    assert again == settings


def test_legacy_work_log_task_names_are_migrated():
    settings, _ = apply_settings_defaults(None)
    raw = settings.to_public()
    raw["workLogTasks"] = ["Development", "Support"]

    migrated, changed = apply_settings_defaults(raw)

    assert changed
    assert [t.name for t in migrated.work_log_tasks] == ["Development", "Support"]
    assert all(t.id for t in migrated.work_log_tasks)
    assert migrated.work_log_tasks[1].teams == migrated.internal_teams


def test_demo_members():
    members = build_demo_members(today=date(2024, 2, 29))

    assert len(members) == 5
    assert members[0].role == TeamMemberRole.MANAGER
    assert members[0].internal_team == "Engineering"
    assert members[1].internal_team == "QA"
    assert all(m.role == TeamMemberRole.MEMBER for m in members[1:])
    assert members[1].join_date == "2023-02-28"
    assert len({m.id for m in members}) == 5


@pytest.mark.asyncio
async def test_load_populates_store_migrates_roles_and_colors(make_workspace, gateway):
    ws = await make_workspace()

    assert ws.store.count(Collection.PROJECTS) == 2
    assert ws.store.count(Collection.WORK_LOGS) == 3
    assert ws.store.get(Collection.TEAM_MEMBERS, OTHER_ID).role == TeamMemberRole.MEMBER
    assert [m.color for m in ws.store.team_members] == list(MEMBER_PALETTE[:3])
    # Colors are derived, never written back.
    assert all("color" not in doc for doc in gateway.dump("teamMembers").values())
    # Incomplete settings were completed and persisted.
    assert gateway.dump("settings")["app"]["leaveTypes"]
    assert ws.current_user.id == MANAGER_ID
    assert ws.snapshot.revision == 1


@pytest.mark.asyncio
async def test_empty_team_is_seeded_once():
    gateway = FailingGateway()
    ws = Workspace(gateway, seed_demo_data=True)

    await ws.start()
    assert ws.store.count(Collection.TEAM_MEMBERS) == 5

    await ws.bootstrapper.reload()
    assert len(gateway.dump("teamMembers")) == 5


@pytest.mark.asyncio
async def test_reload_never_seeds():
    gateway = FailingGateway()
    ws = Workspace(gateway, seed_demo_data=True)

    await ws.bootstrapper.reload()

    assert ws.store.count(Collection.TEAM_MEMBERS) == 0


@pytest.mark.asyncio
async def test_unknown_saved_user_is_cleared_without_fallback(gateway):
    ws = Workspace(gateway, session_scope={"currentUserId": "ghost"}, seed_demo_data=False)

    await ws.start()

    assert ws.session.saved_user_id is None
    assert ws.current_user is None


@pytest.mark.asyncio
async def test_fetch_failure_raises_bootstrap_error(gateway):
    gateway.fail_when = {"get_collection": lambda name: name == "notes"}
    ws = Workspace(gateway, seed_demo_data=False)

    with pytest.raises(BootstrapError):
        await ws.start()
    assert ws.snapshot is None
