# teamsync/schemas/work_log.py
from pydantic import Field

from teamsync.schemas.base import Record


class WorkLog(Record):
    """
    Time spent by a member on a task of a project on a given day.
    """

    member_id: str
    project_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    task_name: str = "N/A"
    time_spent_minutes: int = Field(0, ge=0)
    comments: str | None = None
    requested_from: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
