# tests/test_rules.py
import pytest

from teamsync.schemas.attendance import AttendancePatch, AttendanceRecord, AttendanceStatus
from teamsync.schemas.project import Goal, Metric, Project, ProjectStatus
from teamsync.services.rules import (
    apply_status_transition,
    merge_attendance,
    strip_member_references,
)

NOW = "2025-02-01T10:00:00.000Z"
EARLIER = "2025-01-10T12:00:00.000Z"


def _project(status: ProjectStatus, completion_date=None) -> Project:
    return Project(id="p1", name="Website", status=status, completion_date=completion_date)


def test_entering_done_stamps_completion_date():
    previous = _project(ProjectStatus.QC)
    updated, entered = apply_status_transition(previous, _project(ProjectStatus.DONE), NOW)

    assert entered is True
    assert updated.completion_date == NOW
    assert updated.updated_at == NOW


def test_saving_done_project_keeps_first_stamp():
    previous = _project(ProjectStatus.DONE, completion_date=EARLIER)
    # The client may send a different (or no) completion date; the stored one wins.
    updated, entered = apply_status_transition(previous, _project(ProjectStatus.DONE, NOW), NOW)

    assert entered is False
    assert updated.completion_date == EARLIER


def test_leaving_done_clears_completion_date():
    previous = _project(ProjectStatus.DONE, completion_date=EARLIER)
    updated, entered = apply_status_transition(previous, _project(ProjectStatus.IN_PROGRESS, EARLIER), NOW)

    assert entered is False
    assert updated.completion_date is None
    assert updated.updated_at == NOW


def test_transition_does_not_mutate_inputs():
    previous = _project(ProjectStatus.TODO)
    incoming = _project(ProjectStatus.DONE)
    apply_status_transition(previous, incoming, NOW)

    assert incoming.completion_date is None
    assert incoming.updated_at is None


def test_present_after_leave_drops_leave_type():
    existing = AttendanceRecord(
        id="m1-2025-01-06",
        member_id="m1",
        date="2025-01-06",
        status=AttendanceStatus.LEAVE,
        leave_type="Sick Leave",
        notes="flu",
    )
    merged = merge_attendance(existing, AttendancePatch(id="m1-2025-01-06", status=AttendanceStatus.PRESENT))

    assert merged.status == AttendanceStatus.PRESENT
    assert merged.leave_type is None
    assert merged.notes == "flu"
    assert merged.id == "m1-2025-01-06"


def test_new_attendance_defaults_to_present_with_conventional_id():
    merged = merge_attendance(None, AttendancePatch(member_id="m1", date="2025-01-07", notes="   "))

    assert merged.id == "m1-2025-01-07"
    assert merged.status == AttendanceStatus.PRESENT
    assert merged.notes is None


def test_leave_keeps_leave_type_and_trims_notes():
    merged = merge_attendance(
        None,
        AttendancePatch(
            member_id="m1",
            date="2025-01-07",
            status=AttendanceStatus.LEAVE,
            leave_type="Casual Leave",
            notes="  dentist ",
        ),
    )

    assert merged.leave_type == "Casual Leave"
    assert merged.notes == "dentist"


def test_attendance_without_member_or_date_is_rejected():
    with pytest.raises(ValueError):
        merge_attendance(None, AttendancePatch(status=AttendanceStatus.PRESENT))


def test_strip_member_references_clears_every_reference():
    project = Project(
        id="p1",
        name="Website",
        assignees=["m1", "m2"],
        team_lead_id="m2",
        goals=[Goal(id="g1", name="Launch", metrics=[Metric(id="k1", member_id="m2"), Metric(id="k2", member_id="m1")])],
    )
    assert project.references_member("m2")

    stripped = strip_member_references(project, "m2")

    assert stripped.assignees == ["m1"]
    assert stripped.team_lead_id is None
    assert [m.member_id for m in stripped.goals[0].metrics] == [None, "m1"]
    assert not stripped.references_member("m2")
    # input untouched
    assert project.assignees == ["m1", "m2"]
