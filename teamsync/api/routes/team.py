# teamsync/api/routes/team.py
from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, Depends, Path

from teamsync.api.dependencies.workspace import get_workspace, require_manager
from teamsync.api.errors import domain_errors, to_response
from teamsync.schemas.mutation import MutationResponse
from teamsync.schemas.team_member import TeamMember
from teamsync.services.workspace import Workspace

router = APIRouter(prefix="/team", tags=["Team"])


@router.get(
    "",
    response_model=list[dict[str, Any]],
    summary="List team members",
    description="In display order, each with its palette `color`.",
)
async def list_team(workspace: Workspace = Depends(get_workspace)) -> list[dict[str, Any]]:
    return [m.to_public() for m in workspace.store.team_members]


@router.post(
    "",
    response_model=MutationResponse,
    status_code=HTTPStatus.CREATED,
    dependencies=[Depends(require_manager)],
    summary="Add a team member (managers only)",
    responses={
        400: {"description": "The team is full, or a member with this id already exists."},
        403: {"description": "The acting user is not a manager."},
    },
)
async def add_member(payload: TeamMember, workspace: Workspace = Depends(get_workspace)) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.add_team_member(payload)
    return to_response(result, workspace)


@router.put(
    "/{member_id}",
    response_model=MutationResponse,
    dependencies=[Depends(require_manager)],
    summary="Update a team member (managers only)",
    responses={404: {"description": "Unknown member id."}},
)
async def update_member(
    payload: TeamMember,
    member_id: str = Path(..., description="Team member id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.update_team_member(payload.model_copy(update={"id": member_id}))
    return to_response(result, workspace)


@router.delete(
    "/{member_id}",
    response_model=MutationResponse,
    dependencies=[Depends(require_manager)],
    summary="Delete a team member and everything that references it (managers only)",
    description=(
        "Cascade: the member is removed from every project (assignee, team lead, "
        "goal metric owner) and all of its attendance records and work logs are "
        "deleted, then the member itself.\n\n"
        "If any step fails the whole workspace is reloaded from the backend and "
        "a 502 with `reconciled: true` is returned."
    ),
    responses={
        404: {"description": "Unknown member id."},
        502: {"description": "The cascade failed part-way and the data was reloaded."},
    },
)
async def delete_member(
    member_id: str = Path(..., description="Team member id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.delete_team_member(member_id)
    return to_response(result, workspace)
