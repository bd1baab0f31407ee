# teamsync/api/routes/notes.py
from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, Depends, Path, Query

from teamsync.api.dependencies.workspace import get_workspace
from teamsync.api.errors import domain_errors, to_response
from teamsync.schemas.mutation import MutationResponse
from teamsync.schemas.note import Note
from teamsync.services.workspace import Workspace

router = APIRouter(prefix="/notes", tags=["Notes"])


@router.get("", response_model=list[dict[str, Any]], summary="List notes")
async def list_notes(
    user_id: str | None = Query(default=None, alias="userId", description="Only notes owned by this member."),
    workspace: Workspace = Depends(get_workspace),
) -> list[dict[str, Any]]:
    notes = workspace.store.notes
    if user_id:
        notes = [n for n in notes if n.user_id == user_id]
    return [n.to_public() for n in notes]


@router.post(
    "",
    response_model=MutationResponse,
    status_code=HTTPStatus.CREATED,
    summary="Create a note owned by the acting user",
    responses={
        400: {"description": "A note with this id already exists."},
        502: {"description": "The persistence backend rejected the write."},
    },
)
async def create_note(payload: Note, workspace: Workspace = Depends(get_workspace)) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.create_note(payload)
    return to_response(result, workspace)


@router.put(
    "/{note_id}",
    response_model=MutationResponse,
    summary="Replace a note",
    description="The owner (`userId`) and `createdAt` always come from the stored note.",
    responses={404: {"description": "Unknown note id."}},
)
async def update_note(
    payload: Note,
    note_id: str = Path(..., description="Note id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.update_note(payload.model_copy(update={"id": note_id}))
    return to_response(result, workspace)


@router.delete(
    "/{note_id}",
    response_model=MutationResponse,
    summary="Delete a note",
    responses={404: {"description": "Unknown note id."}},
)
async def delete_note(
    note_id: str = Path(..., description="Note id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.delete_note(note_id)
    return to_response(result, workspace)
