# teamsync/services/store.py
from __future__ import annotations

from typing import Callable, Iterable

from teamsync.schemas.activity import Activity
from teamsync.schemas.app_settings import AppSettings
from teamsync.schemas.attendance import AttendanceRecord
from teamsync.schemas.base import Collection, Record
from teamsync.schemas.note import Note
from teamsync.schemas.project import Project
from teamsync.schemas.team_member import TeamMember
from teamsync.schemas.work_log import WorkLog

# Record type held by each id-keyed collection of the store.
RECORD_TYPES: dict[Collection, type[Record]] = {
    Collection.PROJECTS: Project,
    Collection.ATTENDANCE: AttendanceRecord,
    Collection.NOTES: Note,
    Collection.WORK_LOGS: WorkLog,
    Collection.TEAM_MEMBERS: TeamMember,
    Collection.ACTIVITIES: Activity,
}


class EntityStore:
    """
    In-memory snapshot of every collection, keyed by id.

    This is the source of truth for rendering. It performs no validation and
    no I/O; the mutation coordinator is its only writer and only calls it
    after the matching gateway write succeeded.
    """

    def __init__(self) -> None:
        self._data: dict[Collection, dict[str, Record]] = {c: {} for c in RECORD_TYPES}
        self.settings: AppSettings = AppSettings()

    def get_all(self, collection: Collection) -> list[Record]:
        return list(self._data[collection].values())

    def get(self, collection: Collection, record_id: str) -> Record | None:
        return self._data[collection].get(record_id)

    def upsert(self, collection: Collection, record: Record) -> None:
        self._data[collection][record.id] = record

    def remove(self, collection: Collection, record_id: str) -> Record | None:
        return self._data[collection].pop(record_id, None)

    def remove_where(
        self, collection: Collection, predicate: Callable[[Record], bool]
    ) -> list[Record]:
        bucket = self._data[collection]
        removed = [record for record in bucket.values() if predicate(record)]
        for record in removed:
            del bucket[record.id]
        return removed

    def replace_all(self, collection: Collection, records: Iterable[Record]) -> None:
        self._data[collection] = {record.id: record for record in records}

    def count(self, collection: Collection) -> int:
        return len(self._data[collection])

    def clear(self) -> None:
        for collection in self._data:
            self._data[collection] = {}
        self.settings = AppSettings()

    def snapshot(self) -> dict[str, object]:
        """
        Deep, JSON-ready copy of the whole store. Used to compare states.
        """
        out: dict[str, object] = {
            collection.value: {
                record_id: record.to_public()
                for record_id, record in sorted(bucket.items())
            }
            for collection, bucket in self._data.items()
        }
        out[Collection.SETTINGS.value] = self.settings.to_public()
        return out

    # Typed accessors used by the coordinator and renderer.

    @property
    def projects(self) -> list[Project]:
        return self.get_all(Collection.PROJECTS)  # type: ignore[return-value]

    @property
    def attendance(self) -> list[AttendanceRecord]:
        return self.get_all(Collection.ATTENDANCE)  # type: ignore[return-value]

    @property
    def notes(self) -> list[Note]:
        return self.get_all(Collection.NOTES)  # type: ignore[return-value]

    @property
    def work_logs(self) -> list[WorkLog]:
        return self.get_all(Collection.WORK_LOGS)  # type: ignore[return-value]

    @property
    def team_members(self) -> list[TeamMember]:
        return self.get_all(Collection.TEAM_MEMBERS)  # type: ignore[return-value]

    @property
    def activities(self) -> list[Activity]:
        return self.get_all(Collection.ACTIVITIES)  # type: ignore[return-value]
