# teamsync/schemas/notification.py
from enum import Enum

from pydantic import BaseModel, Field

from teamsync.schemas.base import utc_now_iso


class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """
    A user-facing message (the equivalent of an alert box).
    """

    level: NotificationLevel = Field(..., examples=["error"])
    message: str = Field(
        ...,
        description="Text shown to the user.",
        examples=["Could not update the project."],
    )
    timestamp: str = Field(default_factory=utc_now_iso)
