# teamsync/schemas/session.py
from enum import Enum

from pydantic import Field

from teamsync.schemas.base import CamelModel


class View(str, Enum):
    """
    Top-level screens the user can navigate between.
    """

    DASHBOARD = "dashboard"
    PROJECTS = "projects"
    ATTENDANCE = "attendance"
    NOTES = "notes"
    WORKLOG = "worklog"
    ADMIN = "admin"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class SessionInfo(CamelModel):
    """
    Public view of the persisted session keys.
    """

    current_user_id: str | None = Field(
        None,
        description="Id of the acting team member, or null when logged out.",
    )
    current_view: View = View.DASHBOARD
    theme: Theme | None = Field(
        None,
        description="Stored light/dark preference, null when never chosen.",
    )


class LoginRequest(CamelModel):
    email: str = Field(..., description="Email of the team member.", examples=["member1@example.com"])


class SwitchUserRequest(CamelModel):
    member_id: str = Field(..., description="Id of the team member to act as.")


class ViewRequest(CamelModel):
    view: View


class ThemeRequest(CamelModel):
    theme: Theme
