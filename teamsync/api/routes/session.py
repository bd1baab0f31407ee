# teamsync/api/routes/session.py
from http import HTTPStatus

from fastapi import APIRouter, Depends

from teamsync.api.dependencies.workspace import get_workspace
from teamsync.api.errors import domain_errors
from teamsync.schemas.session import (
    LoginRequest,
    SessionInfo,
    SwitchUserRequest,
    ThemeRequest,
    ViewRequest,
)
from teamsync.services.workspace import Workspace

router = APIRouter(prefix="/session", tags=["Session"])


@router.get(
    "",
    response_model=SessionInfo,
    summary="Current session state",
    description="Acting user id, last top-level view and stored theme preference.",
)
async def get_session(workspace: Workspace = Depends(get_workspace)) -> SessionInfo:
    return workspace.session.info()


@router.post(
    "/login",
    response_model=dict,
    summary="Log in by email",
    description=(
        "Matches the email case-insensitively against the team, stores the "
        "member as the acting user and appends a `login` activity."
    ),
    responses={
        404: {
            "description": "No team member has this email.",
            "content": {
                "application/json": {
                    "example": {"detail": "No team member with that email address."}
                }
            },
        }
    },
)
async def login(payload: LoginRequest, workspace: Workspace = Depends(get_workspace)) -> dict:
    with domain_errors():
        member = await workspace.login(payload.email)
    return member.to_public()


@router.post("/logout", response_model=SessionInfo, summary="End the session")
async def logout(workspace: Workspace = Depends(get_workspace)) -> SessionInfo:
    workspace.logout()
    return workspace.session.info()


@router.post(
    "/switch-user",
    response_model=SessionInfo,
    summary="Act as another team member",
    responses={404: {"description": "Unknown team member id."}},
)
async def switch_user(
    payload: SwitchUserRequest,
    workspace: Workspace = Depends(get_workspace),
) -> SessionInfo:
    with domain_errors():
        workspace.switch_user(payload.member_id)
    return workspace.session.info()


@router.put("/view", response_model=SessionInfo, status_code=HTTPStatus.OK, summary="Navigate to a view")
async def set_view(payload: ViewRequest, workspace: Workspace = Depends(get_workspace)) -> SessionInfo:
    workspace.set_view(payload.view)
    return workspace.session.info()


@router.put("/theme", response_model=SessionInfo, summary="Store the light/dark preference")
async def set_theme(payload: ThemeRequest, workspace: Workspace = Depends(get_workspace)) -> SessionInfo:
    workspace.set_theme(payload.theme)
    return workspace.session.info()
