# teamsync/api/routes/settings.py
from typing import Any

from fastapi import APIRouter, Body, Depends

from teamsync.api.dependencies.workspace import get_workspace, require_manager
from teamsync.api.errors import domain_errors, to_response
from teamsync.schemas.mutation import MutationResponse
from teamsync.services.workspace import Workspace

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=dict[str, Any], summary="Application settings")
async def get_app_settings(workspace: Workspace = Depends(get_workspace)) -> dict[str, Any]:
    return workspace.store.settings.to_public()


@router.patch(
    "",
    response_model=MutationResponse,
    dependencies=[Depends(require_manager)],
    summary="Change application settings (managers only)",
    description="camelCase keys are merged over the current settings and the whole document is saved.",
    responses={
        403: {"description": "The acting user is not a manager."},
        400: {"description": "The merged settings are invalid."},
    },
)
async def update_app_settings(
    changes: dict[str, Any] = Body(..., examples=[{"appName": "Ops Hub", "maxTeamMembers": 25}]),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.update_settings(changes)
    return to_response(result, workspace)
