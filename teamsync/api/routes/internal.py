# teamsync/api/routes/internal.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Request

from teamsync.api.dependencies.internal_auth import verify_internal_api_key
from teamsync.schemas.view import ViewSnapshot
from teamsync.services.bootstrap import BootstrapError

router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(verify_internal_api_key)],
)


@router.post(
    "/reload",
    response_model=ViewSnapshot,
    status_code=HTTPStatus.OK,
    summary="Rebuild the workspace from the persistence backend",
    description=(
        "Runs the reconciliation reload: every collection is re-read and the "
        "store replaced, without demo seeding.\n\n"
        "Also recovers a service whose initial load failed. Protected via the "
        "`X-Internal-Api-Key` header when configured."
    ),
    responses={
        401: {"description": "Missing or invalid internal API key (if configured)."},
        503: {"description": "The backend could not be read."},
    },
)
async def reload_workspace(request: Request) -> ViewSnapshot:
    workspace = getattr(request.app.state, "workspace", None)
    if workspace is None:
        raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail="Workspace not started.")
    try:
        await workspace.bootstrapper.reload()
    except BootstrapError as exc:
        request.app.state.bootstrap_error = exc
        raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    request.app.state.bootstrap_error = None
    return workspace.snapshot
