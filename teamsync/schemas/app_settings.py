# teamsync/schemas/app_settings.py
from __future__ import annotations

from typing import Any

from pydantic import Field

from teamsync.schemas.base import CamelModel, Record, new_id

# Well-known document id of the single settings record.
SETTINGS_DOC_ID = "app"


class WorkLogTask(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    category: str = "General"
    teams: list[str] = Field(default_factory=list)


class Holiday(CamelModel):
    date: str = Field(..., description="YYYY-MM-DD")
    name: str


class AppSettings(Record):
    """
    Application-wide configuration edited from the admin screen.
    """

    id: str = SETTINGS_DOC_ID
    app_name: str = "TeamSync"
    app_logo_url: str = ""
    work_log_tasks: list[WorkLogTask] = Field(default_factory=list)
    internal_teams: list[str] = Field(default_factory=list)
    holidays: list[Holiday] = Field(default_factory=list)
    leave_types: list[str] = Field(default_factory=list)
    priorities: list[str] = Field(default_factory=list)
    max_team_members: int = Field(20, ge=1)
    default_project_priority: str = "Medium"
    default_theme: str = "User Choice"
    note_colors: list[str] = Field(default_factory=list)
    welcome_message: str = ""


INITIAL_INTERNAL_TEAMS = ["Engineering", "QA", "Marketing", "Design"]

_DEFAULT_TASKS = [
    ("Development", "Core", ["Engineering"]),
    ("Meeting", "General", ["Engineering", "QA", "Marketing", "Design"]),
    ("Code Review", "Core", ["Engineering"]),
    ("Testing", "Core", ["QA"]),
    ("Documentation", "General", ["Engineering", "QA"]),
    ("Design", "Core", ["Design"]),
    ("Project Management", "General", ["Engineering"]),
    ("Ad Campaign", "Marketing", ["Marketing"]),
    ("SEO Analysis", "Marketing", ["Marketing"]),
]


def default_app_settings() -> dict[str, Any]:
    """
    The fixed default table used to fill missing settings keys.

    Built per call so generated task ids are never shared between workspaces.
    """
    return {
        "appName": "TeamSync",
        "appLogoUrl": "",
        "workLogTasks": [
            {"id": new_id(), "name": name, "category": category, "teams": list(teams)}
            for name, category, teams in _DEFAULT_TASKS
        ],
        "internalTeams": list(INITIAL_INTERNAL_TEAMS),
        "holidays": [],
        "leaveTypes": ["Sick Leave", "Casual Leave", "Earned Leave", "Unpaid Leave"],
        "priorities": ["Low", "Medium", "High"],
        "maxTeamMembers": 20,
        "defaultProjectPriority": "Medium",
        "defaultTheme": "User Choice",
        "noteColors": ["#ffffff", "#fff9c4", "#c8e6c9", "#bbdefb", "#ffcdd2", "#e1bee7"],
        "welcomeMessage": "Welcome back! Here's what's happening with your team today.",
    }
