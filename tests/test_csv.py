# tests/test_csv.py
import pytest

from teamsync.schemas.base import Collection
from teamsync.schemas.project import Goal, Metric, Project, ProjectStatus
from teamsync.schemas.team_member import TeamMember
from teamsync.services.csv_export import export_csv, flatten_collection
from teamsync.services.csv_import import (
    ImportContext,
    ImportRejected,
    RowRejection,
    validate_attendance_row,
    validate_import,
    validate_work_log_row,
)
from teamsync.services.csv_io import CsvFormatError, read_csv, write_csv
from teamsync.services.dates import format_display_date, normalize_date, parse_display_date
from teamsync.services.store import EntityStore

NOW = "2025-02-01T10:00:00.000Z"


def _members():
    return [TeamMember(id="m1", name="Ann"), TeamMember(id="m2", name="Ben")]


def _projects():
    return [Project(id="p1", name="Website")]


def test_display_dates():
    assert format_display_date("2025-03-09") == "09-03-2025"
    assert format_display_date("2025-03-09T23:10:00.000Z") == "09-03-2025"
    assert format_display_date("") == ""
    assert parse_display_date("09-03-2025") == "2025-03-09"
    assert parse_display_date("9/3/2025") == "2025-03-09"
    assert parse_display_date("31-02-2025") is None
    assert normalize_date("2025-03-09") == "2025-03-09"
    assert normalize_date("") is None
    with pytest.raises(ValueError):
        normalize_date("next tuesday")


def test_write_csv_quotes_and_crlf():
    text = write_csv([{"name": 'Say "hi", then', "notes": "a\nb", "empty": None}])

    assert text.startswith("name,notes,empty\r\n")
    assert '"Say ""hi"", then"' in text
    assert '"a\nb"' in text
    assert text.endswith(",\r\n")


def test_read_csv_rejects_empty_and_header_only():
    with pytest.raises(CsvFormatError):
        read_csv("")
    with pytest.raises(CsvFormatError):
        read_csv("id,name\r\n\r\n")


def test_read_csv_strips_bom_and_skips_blank_lines():
    rows = read_csv("\ufeffid,name\r\n1,Ann\r\n\r\n2,Ben\r\n")
    assert rows == [{"id": "1", "name": "Ann"}, {"id": "2", "name": "Ben"}]


def test_project_export_import_round_trip():
    store = EntityStore()
    original = Project(
        id="p1",
        name="Website, phase 2",
        description='Quote "this"',
        status=ProjectStatus.DONE,
        assignees=["m2", "m1"],
        tags=["web", "q1"],
        due_date="2025-03-01",
        priority="High",
        team_lead_id="m1",
        goals=[Goal(id="g1", name="Launch", completed=True, metrics=[Metric(id="k1", field_name="Pages", member_id="m1")])],
        created_at="2025-01-01T09:00:00.000Z",
        updated_at="2025-01-05T09:00:00.000Z",
        completion_date="2025-01-05T09:00:00.000Z",
    )
    store.upsert(Collection.PROJECTS, original)

    text, filename = export_csv(store, Collection.PROJECTS)
    assert filename == "projects.csv"

    records = validate_import(Collection.PROJECTS, read_csv(text), ImportContext(now=NOW))
    assert len(records) == 1
    imported = records[0]

    assert imported.id == original.id
    assert imported.name == original.name
    assert imported.description == original.description
    assert imported.status == original.status
    assert set(imported.assignees) == set(original.assignees)
    assert set(imported.tags) == set(original.tags)
    assert imported.due_date == "2025-03-01"
    assert imported.created_at == "2025-01-01"
    assert imported.completion_date == "2025-01-05"
    assert imported.goals == original.goals
    assert imported.completion_percentage == 100.0


def test_team_import_without_id_is_rejected_as_a_whole():
    rows = [
        {"id": "m9", "name": "Dana"},
        {"id": "", "name": "Eli"},
    ]
    with pytest.raises(ImportRejected) as exc_info:
        validate_import(Collection.TEAM_MEMBERS, rows, ImportContext(members=_members(), now=NOW))

    assert exc_info.value.reasons == ["Row 3: Missing required 'id' value."]


def test_team_import_respects_team_limit():
    rows = [{"id": "m3", "name": "Cara"}]
    ctx = ImportContext(members=_members(), max_team_members=2, now=NOW)

    with pytest.raises(ImportRejected):
        validate_import(Collection.TEAM_MEMBERS, rows, ctx)


def test_team_import_of_existing_ids_does_not_count_twice():
    rows = [{"id": "m1", "name": "Ann", "role": "Manager"}, {"id": "m2", "name": "Ben"}]
    ctx = ImportContext(members=_members(), max_team_members=2, now=NOW)

    records = validate_import(Collection.TEAM_MEMBERS, rows, ctx)
    assert [r.id for r in records] == ["m1", "m2"]


def test_work_log_rows_get_fresh_ids_and_resolve_names():
    ctx = ImportContext(members=_members(), projects=_projects(), now=NOW)
    result = validate_work_log_row(
        {"date": "06-01-2025", "memberName": "ben", "projectName": "WEBSITE", "timeSpentMinutes": "45"},
        2,
        ctx,
    )

    assert not isinstance(result, RowRejection)
    assert result.id
    assert result.member_id == "m2"
    assert result.project_id == "p1"
    assert result.date == "2025-01-06"
    assert result.time_spent_minutes == 45
    assert result.task_name == "N/A"


def test_work_log_row_with_unknown_member_is_rejected():
    ctx = ImportContext(members=_members(), projects=_projects(), now=NOW)
    result = validate_work_log_row(
        {"date": "06-01-2025", "memberName": "Zed", "projectName": "Website", "timeSpentMinutes": "45"},
        4,
        ctx,
    )

    assert isinstance(result, RowRejection)
    assert result.row_number == 4
    assert "Zed" in result.reason


def test_attendance_row_by_member_name_drops_leave_type_unless_leave():
    ctx = ImportContext(members=_members(), now=NOW)
    result = validate_attendance_row(
        {"id": "m1-2025-01-06", "date": "06-01-2025", "memberName": "Ann", "status": "Present", "leaveType": "Sick Leave"},
        2,
        ctx,
    )

    assert result.member_id == "m1"
    assert result.date == "2025-01-06"
    assert result.leave_type is None


def test_one_bad_row_rejects_everything():
    rows = [
        {"id": "n1", "title": "A", "content": "x", "status": "Pending", "color": "#ffffff"},
        {"id": "n2", "title": "B", "content": "y", "status": "Someday", "color": "#ffffff"},
    ]
    with pytest.raises(ImportRejected) as exc_info:
        validate_import(Collection.NOTES, rows, ImportContext(now=NOW))

    assert len(exc_info.value.rejections) == 1
    assert exc_info.value.rejections[0].row_number == 3


def test_empty_import_is_rejected():
    with pytest.raises(ImportRejected):
        validate_import(Collection.NOTES, [], ImportContext(now=NOW))


def test_export_of_empty_collection_raises_lookup_error():
    with pytest.raises(LookupError):
        export_csv(EntityStore(), Collection.NOTES)


def test_export_of_settings_is_not_supported():
    with pytest.raises(ValueError):
        flatten_collection(EntityStore(), Collection.SETTINGS)
