# teamsync/schemas/team_member.py
from __future__ import annotations

from enum import Enum
from typing import ClassVar

from pydantic import Field

from teamsync.schemas.base import Record


class TeamMemberRole(str, Enum):
    MANAGER = "Manager"
    MEMBER = "Member"


# Display colors handed out by list position at load time.
MEMBER_PALETTE: tuple[str, ...] = (
    "#f87171",
    "#fb923c",
    "#facc15",
    "#4ade80",
    "#34d399",
    "#2dd4bf",
    "#38bdf8",
    "#818cf8",
    "#a78bfa",
    "#f472b6",
    "#78716c",
)


class TeamMember(Record):
    """
    A person on the team. Managers may administer the team and settings.
    """

    derived_fields: ClassVar[frozenset[str]] = frozenset({"color"})

    name: str = Field(..., description="Display name.", examples=["Team Member 1"])
    email: str | None = Field(None, description="Login email (matched case-insensitively).")
    employee_id: str | None = None
    join_date: str | None = Field(None, description="YYYY-MM-DD")
    birth_date: str | None = Field(None, description="YYYY-MM-DD")
    designation: str | None = None
    department: str | None = None
    company: str | None = None
    mobile_number: str | None = None
    internal_team: str | None = None
    role: TeamMemberRole = TeamMemberRole.MEMBER
    status: str = "Active"

    color: str | None = Field(
        None,
        description="Display color derived from list position; never persisted.",
    )

    @property
    def is_manager(self) -> bool:
        return self.role == TeamMemberRole.MANAGER


def assign_display_colors(members: list[TeamMember]) -> list[TeamMember]:
    """
    Give each member the palette color of its position in the list.
    """
    for index, member in enumerate(members):
        member.color = MEMBER_PALETTE[index % len(MEMBER_PALETTE)]
    return members
