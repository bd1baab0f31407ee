# teamsync/schemas/activity.py
from enum import Enum
from typing import Any

from pydantic import Field

from teamsync.schemas.base import Record, utc_now_iso


class ActivityType(str, Enum):
    LOGIN = "login"
    WORKLOG_ADD = "worklog_add"
    PROJECT_COMPLETED = "project_completed"


class Activity(Record):
    """
    Append-only feed entry. Never updated or deleted.
    """

    type: ActivityType
    user_id: str | None = None
    timestamp: str = Field(default_factory=utc_now_iso)
    details: dict[str, Any] = Field(default_factory=dict)
