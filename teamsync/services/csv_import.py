# teamsync/services/csv_import.py
"""
Validation of imported CSV rows.

Each validator is a pure function from one raw, string-keyed row to either a
validated record or a RowRejection. `validate_import` applies the
collection-wide rules (id requirement, team size) and raises ImportRejected
before anything is written.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from teamsync.schemas.attendance import AttendanceRecord, AttendanceStatus
from teamsync.schemas.base import Collection, Record, new_id
from teamsync.schemas.note import Note, NoteStatus
from teamsync.schemas.project import Goal, Project, ProjectStatus, goal_completion_percentage
from teamsync.schemas.team_member import TeamMember, TeamMemberRole
from teamsync.schemas.work_log import WorkLog
from teamsync.services.csv_io import split_list
from teamsync.services.dates import normalize_date

# Only work logs may be imported without ids; they get fresh ones.
ID_OPTIONAL_COLLECTIONS = frozenset({Collection.WORK_LOGS})

MAX_REPORTED_ERRORS = 10


@dataclass(frozen=True)
class RowRejection:
    row_number: int
    reason: str

    def __str__(self) -> str:
        return f"Row {self.row_number}: {self.reason}"


class ImportRejected(ValueError):
    """
    The import was refused as a whole; nothing was written.
    """

    def __init__(self, collection: Collection, rejections: list[RowRejection]) -> None:
        self.collection = collection
        self.rejections = rejections
        shown = "; ".join(str(r) for r in rejections[:MAX_REPORTED_ERRORS])
        super().__init__(
            f"Import of {collection.value} failed. {len(rejections)} row(s) had errors: {shown}"
        )

    @property
    def reasons(self) -> list[str]:
        return [str(r) for r in self.rejections[:MAX_REPORTED_ERRORS]]


@dataclass
class ImportContext:
    """
    Store state a row validator may consult (name lookups, team limit).
    """

    members: list[TeamMember] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    max_team_members: int = 20
    now: str = ""

    def find_member(self, row: Mapping[str, Any]) -> TeamMember | None:
        member_id = _cell(row, "memberId")
        if member_id:
            for member in self.members:
                if member.id == member_id:
                    return member
        name = _cell(row, "memberName").lower()
        if not name:
            return None
        return next((m for m in self.members if m.name.strip().lower() == name), None)

    def find_project(self, row: Mapping[str, Any]) -> Project | None:
        project_id = _cell(row, "projectId")
        if project_id:
            for project in self.projects:
                if project.id == project_id:
                    return project
        name = _cell(row, "projectName").lower()
        if not name:
            return None
        return next((p for p in self.projects if p.name.strip().lower() == name), None)


RowResult = Record | RowRejection


def _cell(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _optional(row: Mapping[str, Any], key: str) -> str | None:
    return _cell(row, key) or None


def _missing(row: Mapping[str, Any], keys: tuple[str, ...]) -> list[str]:
    return [key for key in keys if not _cell(row, key)]


def _dates(row: Mapping[str, Any], keys: tuple[str, ...]) -> dict[str, str | None]:
    return {key: normalize_date(_cell(row, key)) for key in keys}


def validate_project_row(row: Mapping[str, Any], row_number: int, ctx: ImportContext) -> RowResult:
    missing = _missing(row, ("id", "name", "status", "dueDate"))
    if missing:
        return RowRejection(row_number, f"Missing required data ({', '.join(missing)}).")
    try:
        status = ProjectStatus(_cell(row, "status"))
        dates = _dates(row, ("dueDate", "createdAt", "updatedAt", "completionDate"))
        raw_goals = json.loads(_cell(row, "goals") or "[]")
        goals = [Goal.model_validate(g) for g in raw_goals]
        percentage = _cell(row, "completionPercentage")
        return Project(
            id=_cell(row, "id"),
            name=_cell(row, "name"),
            description=_cell(row, "description"),
            status=status,
            assignees=split_list(row.get("assignees")),
            due_date=dates["dueDate"],
            priority=_optional(row, "priority"),
            tags=split_list(row.get("tags")),
            team_lead_id=_optional(row, "teamLeadId"),
            project_type=_optional(row, "projectType"),
            project_category=_optional(row, "projectCategory"),
            goals=goals,
            stakeholder_name=_optional(row, "stakeholderName"),
            media_product=_optional(row, "mediaProduct"),
            pilot_scope=_optional(row, "pilotScope"),
            client_names=_optional(row, "clientNames"),
            project_approach=_optional(row, "projectApproach"),
            deliverables=_optional(row, "deliverables"),
            results_achieved=_optional(row, "resultsAchieved"),
            created_at=dates["createdAt"] or ctx.now,
            updated_at=dates["updatedAt"] or ctx.now,
            completion_date=dates["completionDate"] if status == ProjectStatus.DONE else None,
            completion_percentage=(
                goal_completion_percentage(goals) if goals else float(percentage or 0)
            ),
        )
    except (ValueError, ValidationError) as exc:
        return RowRejection(row_number, f"Invalid project data: {exc}")


def validate_attendance_row(row: Mapping[str, Any], row_number: int, ctx: ImportContext) -> RowResult:
    missing = _missing(row, ("id", "date", "status"))
    if missing:
        return RowRejection(row_number, f"Missing required data ({', '.join(missing)}).")
    member = ctx.find_member(row)
    if member is None:
        label = _cell(row, "memberName") or _cell(row, "memberId")
        return RowRejection(row_number, f'Could not find a team member named "{label}".')
    try:
        status = AttendanceStatus(_cell(row, "status"))
        return AttendanceRecord(
            id=_cell(row, "id"),
            member_id=member.id,
            date=normalize_date(_cell(row, "date")),
            status=status,
            leave_type=_optional(row, "leaveType") if status == AttendanceStatus.LEAVE else None,
            notes=_optional(row, "notes"),
        )
    except (ValueError, ValidationError) as exc:
        return RowRejection(row_number, f"Invalid attendance data: {exc}")


def validate_team_row(row: Mapping[str, Any], row_number: int, ctx: ImportContext) -> RowResult:
    missing = _missing(row, ("id", "name"))
    if missing:
        return RowRejection(row_number, f"Missing required data ({', '.join(missing)}).")
    try:
        dates = _dates(row, ("joinDate", "birthDate"))
        return TeamMember(
            id=_cell(row, "id"),
            name=_cell(row, "name"),
            email=_optional(row, "email"),
            employee_id=_optional(row, "employeeId"),
            join_date=dates["joinDate"],
            birth_date=dates["birthDate"],
            designation=_optional(row, "designation"),
            department=_optional(row, "department"),
            company=_optional(row, "company"),
            mobile_number=_optional(row, "mobileNumber"),
            internal_team=_optional(row, "internalTeam"),
            role=TeamMemberRole(_cell(row, "role") or TeamMemberRole.MEMBER.value),
            status=_cell(row, "status") or "Active",
        )
    except (ValueError, ValidationError) as exc:
        return RowRejection(row_number, f"Invalid team member data: {exc}")


def validate_note_row(row: Mapping[str, Any], row_number: int, ctx: ImportContext) -> RowResult:
    missing = _missing(row, ("id", "title", "content", "status", "color"))
    if missing:
        return RowRejection(row_number, f"Missing required data ({', '.join(missing)}).")
    try:
        dates = _dates(row, ("dueDate", "createdAt", "updatedAt"))
        return Note(
            id=_cell(row, "id"),
            title=_cell(row, "title"),
            content=_cell(row, "content"),
            status=NoteStatus(_cell(row, "status")),
            due_date=dates["dueDate"],
            tags=split_list(row.get("tags")),
            color=_cell(row, "color"),
            user_id=_optional(row, "userId"),
            created_at=dates["createdAt"] or ctx.now,
            updated_at=dates["updatedAt"] or ctx.now,
        )
    except (ValueError, ValidationError) as exc:
        return RowRejection(row_number, f"Invalid note data: {exc}")


def validate_work_log_row(row: Mapping[str, Any], row_number: int, ctx: ImportContext) -> RowResult:
    if not _cell(row, "date") or _cell(row, "timeSpentMinutes") == "":
        return RowRejection(
            row_number,
            "Missing required columns (date, memberName, projectName, timeSpentMinutes).",
        )
    member = ctx.find_member(row)
    if member is None:
        label = _cell(row, "memberName") or _cell(row, "memberId")
        return RowRejection(row_number, f'Could not find a member named "{label}". Check for typos.')
    project = ctx.find_project(row)
    if project is None:
        label = _cell(row, "projectName") or _cell(row, "projectId")
        return RowRejection(row_number, f'Could not find a project named "{label}". Check for typos.')
    try:
        minutes = int(float(_cell(row, "timeSpentMinutes")))
        return WorkLog(
            id=_cell(row, "id") or new_id(),
            member_id=member.id,
            project_id=project.id,
            date=normalize_date(_cell(row, "date")),
            task_name=_cell(row, "taskName") or "N/A",
            requested_from=_cell(row, "requestedFrom") or "N/A",
            time_spent_minutes=minutes,
            comments=_cell(row, "comments"),
            created_at=normalize_date(_cell(row, "createdAt")) or ctx.now,
            updated_at=ctx.now,
        )
    except (ValueError, ValidationError) as exc:
        return RowRejection(row_number, f"Invalid work log data: {exc}")


ROW_VALIDATORS: dict[Collection, Callable[[Mapping[str, Any], int, ImportContext], RowResult]] = {
    Collection.PROJECTS: validate_project_row,
    Collection.ATTENDANCE: validate_attendance_row,
    Collection.TEAM_MEMBERS: validate_team_row,
    Collection.NOTES: validate_note_row,
    Collection.WORK_LOGS: validate_work_log_row,
}


def validate_import(
    collection: Collection,
    rows: list[Mapping[str, Any]],
    ctx: ImportContext,
) -> list[Record]:
    """
    Validate every row of an import, all or nothing.

    Rules
    -----
    - An empty row list is rejected.
    - Every collection except work logs needs an id on every row; one row
      without an id rejects the whole import.
    - Any row rejection rejects the whole import.
    - Team imports may not push the team past `max_team_members`.

    Returns the validated records; raises ImportRejected otherwise.
    """
    try:
        validator = ROW_VALIDATORS[collection]
    except KeyError:
        raise ValueError(f"Collection '{collection.value}' cannot be imported.") from None

    if not rows:
        raise ImportRejected(collection, [RowRejection(1, "The CSV file has no data rows.")])

    # Header row is row 1, so data rows start at 2.
    if collection not in ID_OPTIONAL_COLLECTIONS:
        missing_ids = [
            RowRejection(index + 2, "Missing required 'id' value.")
            for index, row in enumerate(rows)
            if not _cell(row, "id")
        ]
        if missing_ids:
            raise ImportRejected(collection, missing_ids)

    records: list[Record] = []
    rejections: list[RowRejection] = []
    for index, row in enumerate(rows):
        result = validator(row, index + 2, ctx)
        if isinstance(result, RowRejection):
            rejections.append(result)
        else:
            records.append(result)

    if rejections:
        raise ImportRejected(collection, rejections)

    if collection == Collection.TEAM_MEMBERS:
        team_ids = {m.id for m in ctx.members} | {r.id for r in records}
        if len(team_ids) > ctx.max_team_members:
            raise ImportRejected(
                collection,
                [
                    RowRejection(
                        1,
                        f"Import would exceed the {ctx.max_team_members} team member limit.",
                    )
                ],
            )

    return records
