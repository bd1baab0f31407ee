# teamsync/api/routes/data.py
from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response
from http import HTTPStatus

from teamsync.api.dependencies.workspace import get_workspace, require_manager
from teamsync.api.errors import domain_errors, to_response
from teamsync.schemas.base import Collection
from teamsync.schemas.mutation import MutationResponse
from teamsync.services.csv_io import read_csv
from teamsync.services.workspace import Workspace

router = APIRouter(
    prefix="/data",
    tags=["Import / Export"],
    dependencies=[Depends(require_manager)],
)


@router.get(
    "/{collection}/export",
    response_class=Response,
    summary="Export a collection as CSV",
    description=(
        "Lists are joined with `;`, dates rendered DD-MM-YYYY, project goals "
        "as JSON; attendance and work logs carry member/project names."
    ),
    responses={
        200: {"content": {"text/csv": {}}},
        404: {"description": "The collection is empty."},
    },
)
async def export_collection(
    collection: Collection = Path(..., description="Collection to export."),
    workspace: Workspace = Depends(get_workspace),
) -> Response:
    with domain_errors():
        text, filename = workspace.coordinator.export_csv(collection)
    return Response(
        content=text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/{collection}/import",
    response_model=MutationResponse,
    summary="Import a CSV file into a collection",
    description=(
        "The raw CSV is sent as the request body (`text/csv`). Every row is "
        "validated first; one invalid row (or, outside work logs, one row "
        "without an `id`) rejects the whole file and nothing is written. A "
        "valid file is written in one batch and the workspace is reloaded."
    ),
    responses={
        400: {
            "description": "The file was rejected; nothing was written.",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "message": "Import of teamMembers failed.",
                            "errors": ["Row 2: Missing required 'id' value."],
                        }
                    }
                }
            },
        },
        502: {"description": "The batch write was rejected."},
    },
)
async def import_collection(
    request: Request,
    collection: Collection = Path(..., description="Collection to import into."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="CSV must be UTF-8 encoded.") from exc

    with domain_errors():
        rows = read_csv(text)
        result = await workspace.coordinator.import_csv(collection, rows)
    return to_response(result, workspace)
