# teamsync/api/routes/worklogs.py
from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, Depends, Path, Query

from teamsync.api.dependencies.workspace import get_workspace
from teamsync.api.errors import domain_errors, to_response
from teamsync.schemas.mutation import MutationResponse
from teamsync.schemas.work_log import WorkLog
from teamsync.services.dates import normalize_date
from teamsync.services.workspace import Workspace

router = APIRouter(prefix="/worklogs", tags=["Work Logs"])


@router.get(
    "",
    response_model=list[dict[str, Any]],
    summary="List work logs",
    description="Newest day first; optionally filtered by member, project or date range.",
)
async def list_work_logs(
    member_id: str | None = Query(default=None, alias="memberId"),
    project_id: str | None = Query(default=None, alias="projectId"),
    date_from: str | None = Query(default=None, alias="from", description="YYYY-MM-DD or DD-MM-YYYY, inclusive."),
    date_to: str | None = Query(default=None, alias="to", description="YYYY-MM-DD or DD-MM-YYYY, inclusive."),
    workspace: Workspace = Depends(get_workspace),
) -> list[dict[str, Any]]:
    logs = workspace.store.work_logs
    if member_id:
        logs = [log for log in logs if log.member_id == member_id]
    if project_id:
        logs = [log for log in logs if log.project_id == project_id]
    with domain_errors():
        start = normalize_date(date_from)
        end = normalize_date(date_to)
    if start:
        logs = [log for log in logs if log.date >= start]
    if end:
        logs = [log for log in logs if log.date <= end]
    logs = sorted(logs, key=lambda log: (log.date, log.created_at or ""), reverse=True)
    return [log.to_public() for log in logs]


@router.post(
    "",
    response_model=MutationResponse,
    status_code=HTTPStatus.CREATED,
    summary="Add several work logs at once",
    description=(
        "All entries are written in one all-or-nothing batch and get fresh ids. "
        "A `worklog_add` activity per entry is appended afterwards on a best-effort "
        "basis; activity failures are reported as warnings."
    ),
    responses={
        400: {"description": "Empty batch."},
        502: {"description": "The batch was rejected; no work log was added."},
    },
)
async def add_work_logs(
    payload: list[WorkLog],
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.add_work_logs_batch(payload)
    return to_response(result, workspace)


@router.put(
    "/{log_id}",
    response_model=MutationResponse,
    summary="Replace a work log",
    responses={404: {"description": "Unknown work log id."}},
)
async def update_work_log(
    payload: WorkLog,
    log_id: str = Path(..., description="Work log id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.update_work_log(payload.model_copy(update={"id": log_id}))
    return to_response(result, workspace)


@router.delete(
    "/{log_id}",
    response_model=MutationResponse,
    summary="Delete a work log",
    responses={404: {"description": "Unknown work log id."}},
)
async def delete_work_log(
    log_id: str = Path(..., description="Work log id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.delete_work_log(log_id)
    return to_response(result, workspace)
