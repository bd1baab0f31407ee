# teamsync/schemas/attendance.py
from enum import Enum

from pydantic import Field

from teamsync.schemas.base import CamelModel, Record


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    WORK_FROM_HOME = "Work From Home"
    LEAVE = "Leave"


def attendance_record_id(member_id: str, date: str) -> str:
    """
    Conventional id of the single record a member has for a day.
    """
    return f"{member_id}-{date}"


class AttendanceRecord(Record):
    """
    One member's attendance for one day.

    Uniqueness per (member, date) is a convention carried by the id, not
    something the store enforces.
    """

    member_id: str = Field(..., description="TeamMember id.")
    date: str = Field(..., description="YYYY-MM-DD", examples=["2025-11-14"])
    status: AttendanceStatus = AttendanceStatus.PRESENT
    leave_type: str | None = Field(
        None,
        description="Only meaningful when status is Leave.",
    )
    notes: str | None = None


class AttendancePatch(CamelModel):
    """
    Partial attendance update merged over the stored record (or defaults).

    Either `id` or both `member_id` and `date` identify the record.
    """

    id: str | None = None
    member_id: str | None = None
    date: str | None = None
    status: AttendanceStatus | None = None
    leave_type: str | None = None
    notes: str | None = None
