# teamsync/api/routes/attendance.py
from typing import Any

from fastapi import APIRouter, Depends, Path, Query

from teamsync.api.dependencies.workspace import get_workspace
from teamsync.api.errors import domain_errors, to_response
from teamsync.schemas.attendance import AttendancePatch
from teamsync.schemas.mutation import MutationResponse
from teamsync.services.dates import normalize_date
from teamsync.services.workspace import Workspace

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.get(
    "",
    response_model=list[dict[str, Any]],
    summary="List attendance records",
    description="Optionally filtered by day (YYYY-MM-DD or DD-MM-YYYY) and member.",
)
async def list_attendance(
    date: str | None = Query(default=None, description="Only records of this day.", examples=["2025-11-14"]),
    member_id: str | None = Query(default=None, alias="memberId", description="Only records of this member."),
    workspace: Workspace = Depends(get_workspace),
) -> list[dict[str, Any]]:
    records = workspace.store.attendance
    if date:
        with domain_errors():
            day = normalize_date(date)
        records = [r for r in records if r.date == day]
    if member_id:
        records = [r for r in records if r.member_id == member_id]
    return [r.to_public() for r in sorted(records, key=lambda r: (r.date, r.member_id))]


@router.put(
    "",
    response_model=MutationResponse,
    summary="Create or update one member's attendance for one day",
    description=(
        "Partial update merged over the stored record. The record is found by "
        "`id`, or by `memberId` + `date` (id `{memberId}-{date}`).\n\n"
        "- status defaults to Present\n"
        "- leaveType is dropped unless status is Leave\n"
        "- blank notes are dropped"
    ),
    responses={
        400: {"description": "Neither an id nor memberId and date were given."},
        502: {"description": "The persistence backend rejected the write; nothing changed."},
    },
)
async def upsert_attendance(
    payload: AttendancePatch,
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        if payload.date:
            payload = payload.model_copy(update={"date": normalize_date(payload.date)})
        result = await workspace.coordinator.upsert_attendance_record(payload)
    return to_response(result, workspace)


@router.delete(
    "/{record_id}",
    response_model=MutationResponse,
    summary="Delete an attendance record",
    responses={404: {"description": "Unknown record id."}},
)
async def delete_attendance(
    record_id: str = Path(..., description="Attendance record id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.delete_attendance_record(record_id)
    return to_response(result, workspace)
