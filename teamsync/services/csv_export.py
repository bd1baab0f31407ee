# teamsync/services/csv_export.py
from __future__ import annotations

import json
from typing import Any

from teamsync.schemas.base import Collection
from teamsync.services.csv_io import join_list, write_csv
from teamsync.services.dates import format_display_date
from teamsync.services.store import EntityStore

EXPORT_FILENAMES: dict[Collection, str] = {
    Collection.PROJECTS: "projects.csv",
    Collection.ATTENDANCE: "attendance.csv",
    Collection.TEAM_MEMBERS: "team_members.csv",
    Collection.NOTES: "notes.csv",
    Collection.WORK_LOGS: "work_logs.csv",
}


def _flatten_projects(store: EntityStore) -> list[dict[str, Any]]:
    return [
        {
            "id": p.id,
            "name": p.name,
            "description": p.description,
            "status": p.status.value,
            "assignees": join_list(p.assignees),
            "dueDate": format_display_date(p.due_date),
            "priority": p.priority or "",
            "tags": join_list(p.tags),
            "createdAt": format_display_date(p.created_at),
            "updatedAt": format_display_date(p.updated_at),
            "stakeholderName": p.stakeholder_name or "",
            "teamLeadId": p.team_lead_id or "",
            "projectType": p.project_type or "",
            "projectCategory": p.project_category or "",
            "goals": json.dumps([g.model_dump(mode="json", by_alias=True) for g in p.goals]),
            "mediaProduct": p.media_product or "",
            "pilotScope": p.pilot_scope or "",
            "clientNames": p.client_names or "",
            "projectApproach": p.project_approach or "",
            "deliverables": p.deliverables or "",
            "resultsAchieved": p.results_achieved or "",
            "completionDate": format_display_date(p.completion_date),
            "completionPercentage": p.completion_percentage,
        }
        for p in store.projects
    ]


def _flatten_attendance(store: EntityStore) -> list[dict[str, Any]]:
    names = {m.id: m.name for m in store.team_members}
    return [
        {
            "id": rec.id,
            "date": format_display_date(rec.date),
            "memberId": rec.member_id,
            "memberName": names.get(rec.member_id, "Unknown"),
            "status": rec.status.value,
            "leaveType": rec.leave_type or "",
            "notes": rec.notes or "",
        }
        for rec in store.attendance
    ]


def _flatten_team(store: EntityStore) -> list[dict[str, Any]]:
    rows = []
    for member in store.team_members:
        row = member.to_public()
        row.pop("color", None)
        row["joinDate"] = format_display_date(member.join_date)
        row["birthDate"] = format_display_date(member.birth_date)
        rows.append(row)
    return rows


def _flatten_notes(store: EntityStore) -> list[dict[str, Any]]:
    rows = []
    for note in store.notes:
        row = note.to_public()
        row["tags"] = join_list(note.tags)
        row["dueDate"] = format_display_date(note.due_date)
        row["createdAt"] = format_display_date(note.created_at)
        row["updatedAt"] = format_display_date(note.updated_at)
        rows.append(row)
    return rows


def _flatten_work_logs(store: EntityStore) -> list[dict[str, Any]]:
    members = {m.id: m.name for m in store.team_members}
    projects = {p.id: p.name for p in store.projects}
    return [
        {
            "id": log.id,
            "date": format_display_date(log.date),
            "memberName": members.get(log.member_id, "Unknown"),
            "projectName": projects.get(log.project_id, "Unknown"),
            "taskName": log.task_name,
            "requestedFrom": log.requested_from or "",
            "timeSpentMinutes": log.time_spent_minutes,
            "comments": log.comments or "",
        }
        for log in store.work_logs
    ]


_FLATTENERS = {
    Collection.PROJECTS: _flatten_projects,
    Collection.ATTENDANCE: _flatten_attendance,
    Collection.TEAM_MEMBERS: _flatten_team,
    Collection.NOTES: _flatten_notes,
    Collection.WORK_LOGS: _flatten_work_logs,
}


def flatten_collection(store: EntityStore, collection: Collection) -> list[dict[str, Any]]:
    """
    Flatten the stored records of `collection` into export rows.

    Lists are semicolon-joined and dates rendered as DD-MM-YYYY.
    """
    try:
        flatten = _FLATTENERS[collection]
    except KeyError:
        raise ValueError(f"Collection '{collection.value}' cannot be exported.") from None
    return flatten(store)


def export_csv(store: EntityStore, collection: Collection) -> tuple[str, str]:
    """
    Returns (csv_text, filename). Raises LookupError when there is nothing
    to export.
    """
    rows = flatten_collection(store, collection)
    if not rows:
        raise LookupError("No data to export.")
    return write_csv(rows), EXPORT_FILENAMES[collection]
