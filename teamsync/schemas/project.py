# teamsync/schemas/project.py

from __future__ import annotations

from enum import Enum

from pydantic import Field

from teamsync.schemas.base import CamelModel, Record, new_id


class ProjectStatus(str, Enum):
    """
    Kanban columns. Any transition is allowed; entering DONE is the only one
    with side effects.
    """

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    QC = "QC"
    BLOCKED = "Blocked"
    DONE = "Done"


# --------------------------------------------------------------------------
# Goals and metrics
# --------------------------------------------------------------------------

class Metric(CamelModel):
    """
    A measurable target inside a goal, optionally owned by a team member.
    """
    id: str = Field(default_factory=new_id)
    field_name: str = ""
    field_value: str | float | None = None
    target_value: str | float | None = None
    member_id: str | None = None
    completed: bool = False
    completion_date: str | None = None


class Goal(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    completed: bool = False
    metrics: list[Metric] = Field(default_factory=list)


# --------------------------------------------------------------------------
# Project
# --------------------------------------------------------------------------

class Project(Record):
    """
    A tracked project.

    `completion_date` is stamped by the transition into DONE and cleared when
    the project leaves DONE. `updated_at` is refreshed on every mutation.
    """

    name: str = Field(..., description="Project name.", examples=["Website Relaunch"])
    description: str = ""
    status: ProjectStatus = ProjectStatus.TODO
    assignees: list[str] = Field(default_factory=list, description="TeamMember ids.")
    due_date: str | None = Field(None, description="YYYY-MM-DD")
    priority: str | None = None
    tags: list[str] = Field(default_factory=list)
    team_lead_id: str | None = None
    project_type: str | None = None
    project_category: str | None = None
    goals: list[Goal] = Field(default_factory=list)

    stakeholder_name: str | None = None
    media_product: str | None = None
    pilot_scope: str | None = None
    client_names: str | None = None
    project_approach: str | None = None
    deliverables: str | None = None
    results_achieved: str | None = None

    created_at: str | None = None
    updated_at: str | None = None
    completion_date: str | None = None
    completion_percentage: float = 0.0

    def references_member(self, member_id: str) -> bool:
        if member_id in self.assignees or self.team_lead_id == member_id:
            return True
        return any(
            metric.member_id == member_id
            for goal in self.goals
            for metric in goal.metrics
        )


def goal_completion_percentage(goals: list[Goal]) -> float:
    """
    Share of completed goals, in percent. Zero when there are no goals.
    """
    if not goals:
        return 0.0
    completed = sum(1 for goal in goals if goal.completed)
    return (completed / len(goals)) * 100.0
