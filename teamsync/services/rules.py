# teamsync/services/rules.py
"""
Derived-field and cascade rules.

Everything here is a pure function over records: no gateway, no store. The
mutation coordinator calls these to compute what it is about to persist.
"""
from __future__ import annotations

from teamsync.schemas.attendance import (
    AttendancePatch,
    AttendanceRecord,
    AttendanceStatus,
    attendance_record_id,
)
from teamsync.schemas.project import Project, ProjectStatus


def apply_status_transition(
    previous: Project | None,
    updated: Project,
    now: str,
) -> tuple[Project, bool]:
    """
    Derive completion fields for a project about to be persisted.

    Returns the project to store and whether this mutation entered DONE.

    - not DONE -> DONE: completion_date = now (entered_done=True)
    - DONE -> DONE: completion_date kept from the stored record
    - leaving DONE: completion_date cleared
    `updated_at` is always refreshed.
    """
    was_done = previous is not None and previous.status == ProjectStatus.DONE
    is_done = updated.status == ProjectStatus.DONE

    changes: dict[str, object] = {"updated_at": now}
    entered_done = False

    if is_done and not was_done:
        changes["completion_date"] = now
        entered_done = True
    elif is_done and was_done:
        changes["completion_date"] = previous.completion_date
    else:
        changes["completion_date"] = None

    return updated.model_copy(update=changes, deep=True), entered_done


def merge_attendance(
    existing: AttendanceRecord | None,
    patch: AttendancePatch,
) -> AttendanceRecord:
    """
    Merge a partial attendance update over the stored record.

    Rules
    -----
    - Fields given in the patch win; others come from the existing record.
    - Status defaults to Present when neither side sets it.
    - leave_type survives only when the resulting status is Leave.
    - notes are trimmed and dropped when blank.
    """
    provided = patch.model_dump(exclude_unset=True)
    base = existing.model_dump() if existing is not None else {}
    merged = {**base, **{k: v for k, v in provided.items() if k != "id"}}

    member_id = merged.get("member_id")
    date = merged.get("date")
    if not member_id or not date:
        raise ValueError("Attendance records need a member_id and a date.")

    record_id = patch.id or (existing.id if existing else None) or attendance_record_id(member_id, date)

    status = merged.get("status") or AttendanceStatus.PRESENT
    leave_type = merged.get("leave_type") if status == AttendanceStatus.LEAVE else None
    notes = (merged.get("notes") or "").strip() or None

    return AttendanceRecord(
        id=record_id,
        member_id=member_id,
        date=date,
        status=status,
        leave_type=leave_type or None,
        notes=notes,
    )


def strip_member_references(project: Project, member_id: str) -> Project:
    """
    Return a copy of `project` with every reference to `member_id` removed:
    assignee dropped, team lead cleared, goal-metric owner cleared.
    """
    goals = []
    for goal in project.goals:
        metrics = [
            metric.model_copy(update={"member_id": None}) if metric.member_id == member_id else metric
            for metric in goal.metrics
        ]
        goals.append(goal.model_copy(update={"metrics": metrics}))

    return project.model_copy(
        update={
            "assignees": [a for a in project.assignees if a != member_id],
            "team_lead_id": None if project.team_lead_id == member_id else project.team_lead_id,
            "goals": goals,
        },
        deep=True,
    )
