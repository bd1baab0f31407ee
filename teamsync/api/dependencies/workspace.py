# teamsync/api/dependencies/workspace.py
from http import HTTPStatus

from fastapi import Depends, HTTPException, Request

from teamsync.schemas.team_member import TeamMember
from teamsync.services.workspace import Workspace


def get_workspace(request: Request) -> Workspace:
    """
    The workspace loaded at startup.

    If the initial load failed every state-dependent route answers 503:
    there is no partially loaded state to show.
    """
    error = getattr(request.app.state, "bootstrap_error", None)
    workspace = getattr(request.app.state, "workspace", None)
    if error is not None or workspace is None:
        raise HTTPException(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            detail=f"Application data could not be loaded: {error or 'not started'}",
        )
    return workspace


def require_user(workspace: Workspace = Depends(get_workspace)) -> TeamMember:
    user = workspace.current_user
    if user is None:
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED,
            detail="Login required.",
        )
    return user


def require_manager(user: TeamMember = Depends(require_user)) -> TeamMember:
    if not user.is_manager:
        raise HTTPException(
            status_code=HTTPStatus.FORBIDDEN,
            detail="Only managers can perform this action.",
        )
    return user
