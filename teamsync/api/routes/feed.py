# teamsync/api/routes/feed.py
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from http import HTTPStatus

from teamsync.api.dependencies.workspace import get_workspace
from teamsync.schemas.activity import ActivityType
from teamsync.schemas.notification import Notification
from teamsync.schemas.view import ViewSnapshot
from teamsync.services.workspace import Workspace

router = APIRouter(tags=["Feed"])


@router.get(
    "/activities",
    response_model=list[dict[str, Any]],
    summary="Recorded activities, newest first",
)
async def list_activities(
    activity_type: ActivityType | None = Query(default=None, alias="type"),
    limit: int = Query(default=50, ge=1, le=500),
    workspace: Workspace = Depends(get_workspace),
) -> list[dict[str, Any]]:
    activities = workspace.store.activities
    if activity_type is not None:
        activities = [a for a in activities if a.type == activity_type]
    activities = sorted(activities, key=lambda a: a.timestamp, reverse=True)
    return [a.to_public() for a in activities[:limit]]


@router.get(
    "/view",
    response_model=ViewSnapshot,
    summary="Latest rebuilt view",
    description=(
        "The snapshot produced by the most recent re-render: revision counter, "
        "current view, acting user, per-collection counts and the recent "
        "activity feed."
    ),
)
async def get_view(workspace: Workspace = Depends(get_workspace)) -> ViewSnapshot:
    snapshot = workspace.snapshot
    if snapshot is None:
        raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail="View not rendered yet.")
    return snapshot


@router.get(
    "/notifications",
    response_model=list[Notification],
    summary="Pending user notifications",
    description="Errors and warnings raised by writes. `drain=true` clears them after reading.",
)
async def list_notifications(
    drain: bool = Query(default=False),
    workspace: Workspace = Depends(get_workspace),
) -> list[Notification]:
    if drain:
        return workspace.notifications.drain()
    return workspace.notifications.pending()
