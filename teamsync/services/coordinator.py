# teamsync/services/coordinator.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from pydantic.alias_generators import to_camel

from teamsync.schemas.activity import Activity, ActivityType
from teamsync.schemas.app_settings import SETTINGS_DOC_ID, AppSettings
from teamsync.schemas.attendance import AttendancePatch, attendance_record_id
from teamsync.schemas.base import Collection, Record, new_id, utc_now_iso
from teamsync.schemas.note import Note
from teamsync.schemas.project import Project, ProjectStatus
from teamsync.schemas.team_member import TeamMember, assign_display_colors
from teamsync.schemas.work_log import WorkLog
from teamsync.services import csv_export
from teamsync.services.bootstrap import BootstrapError
from teamsync.services.cascade import CascadeStep, CascadeWorkflow
from teamsync.services.csv_import import ImportContext, validate_import
from teamsync.services.gateway import GatewayError, PersistenceGateway
from teamsync.services.notifications import NotificationCenter
from teamsync.services.rules import (
    apply_status_transition,
    merge_attendance,
    strip_member_references,
)
from teamsync.services.session_state import SessionState
from teamsync.services.store import EntityStore
from teamsync.services.view import ViewRenderer

logger = logging.getLogger(__name__)

# Human-readable entity names used in user-facing messages.
ENTITY_LABELS: Dict[Collection, str] = {
    Collection.PROJECTS: "project",
    Collection.ATTENDANCE: "attendance record",
    Collection.NOTES: "note",
    Collection.WORK_LOGS: "work log",
    Collection.TEAM_MEMBERS: "team member",
    Collection.ACTIVITIES: "activity",
    Collection.SETTINGS: "settings",
}

INCONSISTENT_STATE_WARNING = (
    "Deleting the team member failed part-way; data may have been left in an "
    "inconsistent state and was reloaded."
)


@dataclass
class MutationResult:
    """
    Outcome of one user intent.

    `ok=False` means the gateway refused the write and the store was left
    unchanged (or, with `reconciled=True`, rebuilt from the gateway).
    """

    entity: str
    ok: bool
    value: Any = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    reconciled: bool = False


class MutationCoordinator:
    """
    The only writer of both the gateway and the store.

    Every operation follows the same order: gateway call, then the matching
    store change, then a render. A failed gateway call leaves the store as it
    was and pushes an error notification.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        store: EntityStore,
        session: SessionState,
        notifications: NotificationCenter,
        renderer: ViewRenderer,
        reload: Callable[[], Awaitable[None]],
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.session = session
        self.notifications = notifications
        self.renderer = renderer
        self._reload = reload
        self._clock = clock

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _render(self) -> None:
        self.renderer.render(self.store, self.session)

    def _require(self, collection: Collection, record_id: str) -> Record:
        record = self.store.get(collection, record_id)
        if record is None:
            raise LookupError(f"{ENTITY_LABELS[collection].capitalize()} '{record_id}' not found")
        return record

    def _require_absent(self, collection: Collection, record_id: str) -> None:
        if self.store.get(collection, record_id) is not None:
            raise ValueError(f"{ENTITY_LABELS[collection].capitalize()} '{record_id}' already exists")

    def _require_manager(self, action: str) -> TeamMember:
        user_id = self.session.saved_user_id
        user = self.store.get(Collection.TEAM_MEMBERS, user_id) if user_id else None
        if user is None or not user.is_manager:
            raise PermissionError(f"Only managers can {action}.")
        return user  # type: ignore[return-value]

    def _failed(self, verb: str, collection: Collection, record_id: Optional[str] = None) -> MutationResult:
        # Called from inside an `except GatewayError` block.
        entity = ENTITY_LABELS[collection]
        logger.exception("Failed to %s %s %s", verb, entity, record_id or "")
        message = f"Could not {verb} the {entity}."
        self.notifications.error(message)
        return MutationResult(entity=entity, ok=False, message=message)

    def _ok(self, collection: Collection, value: Any = None, warnings: Optional[List[str]] = None) -> MutationResult:
        self._render()
        return MutationResult(
            entity=ENTITY_LABELS[collection],
            ok=True,
            value=value,
            warnings=warnings or [],
        )

    def _recolor(self) -> None:
        assign_display_colors(self.store.team_members)

    async def record_activity(
        self,
        activity_type: ActivityType,
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> Optional[Activity]:
        """
        Append an activity attributed to the acting user (or `user_id`).

        Best effort: a gateway failure is logged and returns None; it never
        undoes the mutation that triggered it.
        """
        activity = Activity(
            type=activity_type,
            user_id=user_id or self.session.saved_user_id,
            timestamp=self._clock(),
            details=details or {},
        )
        try:
            activity_id = await self.gateway.add_document(
                Collection.ACTIVITIES.value, activity.to_document()
            )
        except GatewayError as exc:
            logger.warning("Could not record %s activity: %s", activity_type.value, exc)
            return None
        activity = activity.model_copy(update={"id": activity_id})
        self.store.upsert(Collection.ACTIVITIES, activity)
        return activity

    # ------------------------------------------------------------------
    # projects
    # ------------------------------------------------------------------

    async def create_project(self, data: Project) -> MutationResult:
        self._require_absent(Collection.PROJECTS, data.id)
        now = self._clock()
        done = data.status == ProjectStatus.DONE
        project = data.model_copy(
            update={
                "created_at": now,
                "updated_at": now,
                "priority": data.priority or self.store.settings.default_project_priority,
                "completion_date": now if done else None,
            }
        )
        try:
            await self.gateway.set_document(
                Collection.PROJECTS.value, project.id, project.to_document()
            )
        except GatewayError:
            return self._failed("create", Collection.PROJECTS, project.id)

        self.store.upsert(Collection.PROJECTS, project)
        return self._ok(Collection.PROJECTS, project)

    async def update_project(self, updated: Project) -> MutationResult:
        """
        Persist a full project update.

        The transition into Done stamps `completion_date` and appends one
        `project_completed` activity; an already-Done project keeps its
        stamp and emits nothing.
        """
        previous: Project = self._require(Collection.PROJECTS, updated.id)  # type: ignore[assignment]
        project, entered_done = apply_status_transition(previous, updated, self._clock())
        if project.created_at is None:
            project.created_at = previous.created_at

        try:
            await self.gateway.update_document(
                Collection.PROJECTS.value, project.id, project.to_document()
            )
        except GatewayError:
            return self._failed("update", Collection.PROJECTS, project.id)

        self.store.upsert(Collection.PROJECTS, project)

        warnings: List[str] = []
        if entered_done:
            activity = await self.record_activity(
                ActivityType.PROJECT_COMPLETED,
                {
                    "projectId": project.id,
                    "projectName": project.name,
                    "assignees": sorted(set(project.assignees)),
                },
            )
            if activity is None:
                warnings.append("The project completion could not be added to the activity feed.")

        return self._ok(Collection.PROJECTS, project, warnings)

    async def delete_project(self, project_id: str) -> MutationResult:
        self._require(Collection.PROJECTS, project_id)
        try:
            await self.gateway.delete_document(Collection.PROJECTS.value, project_id)
        except GatewayError:
            return self._failed("delete", Collection.PROJECTS, project_id)
        self.store.remove(Collection.PROJECTS, project_id)

        logs = [log for log in self.store.work_logs if log.project_id == project_id]
        results = await asyncio.gather(
            *(self.gateway.delete_document(Collection.WORK_LOGS.value, log.id) for log in logs),
            return_exceptions=True,
        )
        failed = 0
        for log, result in zip(logs, results):
            if isinstance(result, BaseException):
                failed += 1
                logger.warning("Could not delete work log %s of project %s: %s", log.id, project_id, result)
            else:
                self.store.remove(Collection.WORK_LOGS, log.id)

        warnings: List[str] = []
        if failed:
            message = f"{failed} work log(s) of the deleted project could not be removed."
            self.notifications.warning(message)
            warnings.append(message)
        return self._ok(Collection.PROJECTS, project_id, warnings)

    # ------------------------------------------------------------------
    # attendance
    # ------------------------------------------------------------------

    async def upsert_attendance_record(self, patch: AttendancePatch) -> MutationResult:
        """
        Merge a partial attendance update and create-or-replace the record.

        Raises ValueError when neither an id nor member and date identify it.
        """
        record_id = patch.id
        if not record_id and patch.member_id and patch.date:
            record_id = attendance_record_id(patch.member_id, patch.date)
        existing = self.store.get(Collection.ATTENDANCE, record_id) if record_id else None
        record = merge_attendance(existing, patch)  # type: ignore[arg-type]

        try:
            await self.gateway.set_document(
                Collection.ATTENDANCE.value, record.id, record.to_document()
            )
        except GatewayError:
            return self._failed("save", Collection.ATTENDANCE, record.id)

        self.store.upsert(Collection.ATTENDANCE, record)
        return self._ok(Collection.ATTENDANCE, record)

    async def delete_attendance_record(self, record_id: str) -> MutationResult:
        self._require(Collection.ATTENDANCE, record_id)
        try:
            await self.gateway.delete_document(Collection.ATTENDANCE.value, record_id)
        except GatewayError:
            return self._failed("delete", Collection.ATTENDANCE, record_id)
        self.store.remove(Collection.ATTENDANCE, record_id)
        return self._ok(Collection.ATTENDANCE, record_id)

    # ------------------------------------------------------------------
    # notes
    # ------------------------------------------------------------------

    async def create_note(self, data: Note) -> MutationResult:
        self._require_absent(Collection.NOTES, data.id)
        now = self._clock()
        note = data.model_copy(
            update={"user_id": self.session.saved_user_id, "created_at": now, "updated_at": now}
        )
        try:
            await self.gateway.set_document(Collection.NOTES.value, note.id, note.to_document())
        except GatewayError:
            return self._failed("create", Collection.NOTES, note.id)
        self.store.upsert(Collection.NOTES, note)
        return self._ok(Collection.NOTES, note)

    async def update_note(self, updated: Note) -> MutationResult:
        previous: Note = self._require(Collection.NOTES, updated.id)  # type: ignore[assignment]
        note = updated.model_copy(
            update={
                "user_id": previous.user_id,
                "created_at": previous.created_at,
                "updated_at": self._clock(),
            }
        )
        try:
            await self.gateway.update_document(Collection.NOTES.value, note.id, note.to_document())
        except GatewayError:
            return self._failed("update", Collection.NOTES, note.id)
        self.store.upsert(Collection.NOTES, note)
        return self._ok(Collection.NOTES, note)

    async def delete_note(self, note_id: str) -> MutationResult:
        self._require(Collection.NOTES, note_id)
        try:
            await self.gateway.delete_document(Collection.NOTES.value, note_id)
        except GatewayError:
            return self._failed("delete", Collection.NOTES, note_id)
        self.store.remove(Collection.NOTES, note_id)
        return self._ok(Collection.NOTES, note_id)

    # ------------------------------------------------------------------
    # work logs
    # ------------------------------------------------------------------

    async def add_work_logs_batch(self, entries: List[WorkLog]) -> MutationResult:
        """
        Write several work logs in one all-or-nothing batch.

        Each entry gets a fresh id and timestamps. After the batch succeeded,
        one `worklog_add` activity per entry is appended concurrently; those
        are best effort and never roll the work logs back.
        """
        if not entries:
            raise ValueError("At least one work log entry is required.")

        now = self._clock()
        logs = [
            entry.model_copy(update={"id": new_id(), "created_at": now, "updated_at": now})
            for entry in entries
        ]
        try:
            await self.gateway.batch_write(
                Collection.WORK_LOGS.value,
                [{"id": log.id, **log.to_document()} for log in logs],
            )
        except GatewayError:
            return self._failed("save", Collection.WORK_LOGS)

        for log in logs:
            self.store.upsert(Collection.WORK_LOGS, log)

        activities = await asyncio.gather(
            *(
                self.record_activity(
                    ActivityType.WORKLOG_ADD,
                    {
                        "workLogId": log.id,
                        "projectId": log.project_id,
                        "memberId": log.member_id,
                        "timeSpentMinutes": log.time_spent_minutes,
                    },
                )
                for log in logs
            )
        )
        missing = sum(1 for activity in activities if activity is None)
        warnings = []
        if missing:
            warnings.append(f"{missing} work log(s) could not be added to the activity feed.")
        return self._ok(Collection.WORK_LOGS, logs, warnings)

    async def update_work_log(self, updated: WorkLog) -> MutationResult:
        previous: WorkLog = self._require(Collection.WORK_LOGS, updated.id)  # type: ignore[assignment]
        log = updated.model_copy(
            update={"created_at": previous.created_at, "updated_at": self._clock()}
        )
        try:
            await self.gateway.update_document(Collection.WORK_LOGS.value, log.id, log.to_document())
        except GatewayError:
            return self._failed("update", Collection.WORK_LOGS, log.id)
        self.store.upsert(Collection.WORK_LOGS, log)
        return self._ok(Collection.WORK_LOGS, log)

    async def delete_work_log(self, log_id: str) -> MutationResult:
        self._require(Collection.WORK_LOGS, log_id)
        try:
            await self.gateway.delete_document(Collection.WORK_LOGS.value, log_id)
        except GatewayError:
            return self._failed("delete", Collection.WORK_LOGS, log_id)
        self.store.remove(Collection.WORK_LOGS, log_id)
        return self._ok(Collection.WORK_LOGS, log_id)

    # ------------------------------------------------------------------
    # team
    # ------------------------------------------------------------------

    async def add_team_member(self, member: TeamMember) -> MutationResult:
        self._require_manager("add team members")
        self._require_absent(Collection.TEAM_MEMBERS, member.id)
        limit = self.store.settings.max_team_members
        if self.store.count(Collection.TEAM_MEMBERS) >= limit:
            raise ValueError(f"The team already has the maximum of {limit} members.")

        try:
            await self.gateway.set_document(
                Collection.TEAM_MEMBERS.value, member.id, member.to_document()
            )
        except GatewayError:
            return self._failed("add", Collection.TEAM_MEMBERS, member.id)

        self.store.upsert(Collection.TEAM_MEMBERS, member)
        self._recolor()
        return self._ok(Collection.TEAM_MEMBERS, member)

    async def update_team_member(self, member: TeamMember) -> MutationResult:
        self._require_manager("update team members")
        self._require(Collection.TEAM_MEMBERS, member.id)
        try:
            await self.gateway.update_document(
                Collection.TEAM_MEMBERS.value, member.id, member.to_document()
            )
        except GatewayError:
            return self._failed("update", Collection.TEAM_MEMBERS, member.id)

        self.store.upsert(Collection.TEAM_MEMBERS, member)
        self._recolor()
        return self._ok(Collection.TEAM_MEMBERS, member)

    async def delete_team_member(self, member_id: str) -> MutationResult:
        """
        Delete a member together with everything that references it.

        Stage 1 (concurrent): strip the member from every referencing project
        and delete its attendance records and work logs by query.
        Stage 2: delete the member document.

        Only when every step succeeded is the store updated. Any failure runs
        the "reload" compensation instead, because earlier steps may already
        be durable.
        """
        self._require_manager("delete team members")
        member: TeamMember = self._require(Collection.TEAM_MEMBERS, member_id)  # type: ignore[assignment]
        now = self._clock()

        project_steps = []
        for project in self.store.projects:
            if not project.references_member(member_id):
                continue
            stripped = strip_member_references(project, member_id)
            stripped.updated_at = now
            project_steps.append(
                CascadeStep(
                    name=f"update project {project.id}",
                    action=lambda p=stripped: self.gateway.update_document(
                        Collection.PROJECTS.value, p.id, p.to_document()
                    ),
                    apply=lambda p=stripped: self.store.upsert(Collection.PROJECTS, p),
                )
            )

        workflow = CascadeWorkflow(f"delete team member {member_id}", compensate=self._reload)
        workflow.stage(
            *project_steps,
            CascadeStep(
                name="delete attendance",
                action=lambda: self.gateway.delete_by_query(
                    Collection.ATTENDANCE.value, "memberId", member_id
                ),
                apply=lambda: self.store.remove_where(
                    Collection.ATTENDANCE, lambda r: r.member_id == member_id
                ),
            ),
            CascadeStep(
                name="delete work logs",
                action=lambda: self.gateway.delete_by_query(
                    Collection.WORK_LOGS.value, "memberId", member_id
                ),
                apply=lambda: self.store.remove_where(
                    Collection.WORK_LOGS, lambda r: r.member_id == member_id
                ),
            ),
        ).stage(
            CascadeStep(
                name="delete member",
                action=lambda: self.gateway.delete_document(
                    Collection.TEAM_MEMBERS.value, member_id
                ),
                apply=lambda: self.store.remove(Collection.TEAM_MEMBERS, member_id),
            ),
        )

        try:
            report = await workflow.run()
        except BootstrapError:
            logger.exception("Reload after failed deletion of team member %s failed", member_id)
            message = f"Could not delete the {ENTITY_LABELS[Collection.TEAM_MEMBERS]}."
            self.notifications.error(message)
            return MutationResult(entity="team member", ok=False, message=message)

        if not report.ok:
            self.notifications.warning(INCONSISTENT_STATE_WARNING)
            return MutationResult(
                entity="team member",
                ok=False,
                message=INCONSISTENT_STATE_WARNING,
                reconciled=True,
            )

        self._recolor()
        if self.session.saved_user_id == member_id:
            logger.info("Acting user %s was deleted; ending session", member_id)
            self.session.save_user(None)
        return self._ok(Collection.TEAM_MEMBERS, member)

    # ------------------------------------------------------------------
    # settings
    # ------------------------------------------------------------------

    async def update_settings(self, changes: Mapping[str, Any]) -> MutationResult:
        """
        Merge camelCase `changes` over the current settings and persist them.

        Raises ValueError for keys that are not settings fields.
        """
        self._require_manager("change settings")
        known = {info.alias or to_camel(name) for name, info in AppSettings.model_fields.items()}
        unknown = sorted(key for key in changes if key not in known)
        if unknown:
            raise ValueError(f"Unknown settings key(s): {', '.join(unknown)}")

        merged = AppSettings.model_validate(
            {**self.store.settings.to_public(), **changes, "id": SETTINGS_DOC_ID}
        )
        try:
            await self.gateway.set_document(
                Collection.SETTINGS.value, SETTINGS_DOC_ID, merged.to_document()
            )
        except GatewayError:
            return self._failed("save", Collection.SETTINGS, SETTINGS_DOC_ID)
        self.store.settings = merged
        return self._ok(Collection.SETTINGS, merged)

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    async def import_csv(self, collection: Collection, rows: List[Mapping[str, Any]]) -> MutationResult:
        """
        Validate and write an import, then reload everything from the gateway.

        Raises ImportRejected (nothing written) when any row is invalid.
        """
        self._require_manager("import data")
        ctx = ImportContext(
            members=self.store.team_members,
            projects=self.store.projects,
            max_team_members=self.store.settings.max_team_members,
            now=self._clock(),
        )
        records = validate_import(collection, rows, ctx)
        try:
            await self.gateway.batch_write(
                collection.value,
                [{"id": record.id, **record.to_document()} for record in records],
            )
        except GatewayError:
            return self._failed("import", collection)

        logger.info("Imported %d %s record(s)", len(records), collection.value)
        try:
            await self._reload()
        except BootstrapError:
            message = "The import was saved but the data could not be reloaded."
            self.notifications.error(message)
            return MutationResult(
                entity=ENTITY_LABELS[collection], ok=False, value=len(records), message=message
            )
        self.notifications.info(f"Imported {len(records)} {collection.value} record(s).")
        return MutationResult(entity=ENTITY_LABELS[collection], ok=True, value=len(records))

    def export_csv(self, collection: Collection) -> tuple[str, str]:
        self._require_manager("export data")
        return csv_export.export_csv(self.store, collection)
