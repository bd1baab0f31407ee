# tests/test_store.py
from teamsync.schemas.base import Collection
from teamsync.schemas.note import Note
from teamsync.schemas.work_log import WorkLog
from teamsync.services.store import EntityStore


def _log(log_id: str, member_id: str) -> WorkLog:
    return WorkLog(id=log_id, member_id=member_id, project_id="p1", date="2025-01-06", time_spent_minutes=15)


def test_upsert_get_and_remove():
    store = EntityStore()
    note = Note(id="n1", title="Todo")

    store.upsert(Collection.NOTES, note)
    assert store.get(Collection.NOTES, "n1") is note
    assert store.count(Collection.NOTES) == 1

    store.upsert(Collection.NOTES, note.model_copy(update={"title": "Done"}))
    assert store.count(Collection.NOTES) == 1
    assert store.get(Collection.NOTES, "n1").title == "Done"

    assert store.remove(Collection.NOTES, "n1").id == "n1"
    assert store.remove(Collection.NOTES, "n1") is None


def test_remove_where_returns_removed_records():
    store = EntityStore()
    store.replace_all(Collection.WORK_LOGS, [_log("a", "m1"), _log("b", "m2"), _log("c", "m1")])

    removed = store.remove_where(Collection.WORK_LOGS, lambda log: log.member_id == "m1")

    assert sorted(r.id for r in removed) == ["a", "c"]
    assert [log.id for log in store.work_logs] == ["b"]


def test_snapshot_is_a_detached_copy():
    store = EntityStore()
    store.upsert(Collection.WORK_LOGS, _log("a", "m1"))
    before = store.snapshot()

    store.get(Collection.WORK_LOGS, "a").time_spent_minutes = 99

    assert before["worklogs"]["a"]["timeSpentMinutes"] == 15
    assert store.snapshot() != before


def test_clear_resets_everything():
    store = EntityStore()
    store.upsert(Collection.WORK_LOGS, _log("a", "m1"))
    store.settings.app_name = "Changed"

    store.clear()

    assert store.count(Collection.WORK_LOGS) == 0
    assert store.settings.app_name == "TeamSync"
