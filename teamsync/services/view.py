# teamsync/services/view.py
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone

from teamsync.schemas.activity import ActivityType
from teamsync.schemas.base import Collection
from teamsync.schemas.project import ProjectStatus
from teamsync.schemas.view import FeedEvent, ViewSnapshot
from teamsync.services.session_state import SessionState
from teamsync.services.store import RECORD_TYPES, EntityStore

FEED_LIMIT = 10


class ViewRenderer(ABC):
    """
    The single re-render entry point of the presentation layer.

    Called after every successful mutation and after every (re)load.
    """

    @abstractmethod
    def render(self, store: EntityStore, session: SessionState) -> None:
        ...


def _parse_ts(value: str | None) -> datetime:
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_minutes(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    if hours and rest:
        return f"{hours}h {rest}m"
    if hours:
        return f"{hours}h"
    return f"{rest}m"


def build_activity_feed(store: EntityStore, limit: int = FEED_LIMIT) -> list[FeedEvent]:
    """
    Merge work logs, completed projects and logins into one feed, newest
    first. Ordering is computed here, never taken from storage order.
    """
    member_names = {m.id: m.name for m in store.team_members}
    project_names = {p.id: p.name for p in store.projects}

    def member(member_id: str | None) -> str:
        return member_names.get(member_id or "", "Unknown")

    events: list[FeedEvent] = []

    for log in store.work_logs:
        events.append(
            FeedEvent(
                type="log",
                timestamp=log.updated_at or log.created_at or log.date,
                text=(
                    f"{member(log.member_id)} logged {_format_minutes(log.time_spent_minutes)} "
                    f"on {project_names.get(log.project_id, 'a project')}."
                ),
            )
        )

    for project in store.projects:
        if project.status == ProjectStatus.DONE and project.completion_date:
            names = ", ".join(member(a) for a in project.assignees) or "The team"
            events.append(
                FeedEvent(
                    type="completion",
                    timestamp=project.completion_date,
                    text=f"{names} completed project {project.name}.",
                )
            )

    for activity in store.activities:
        if activity.type == ActivityType.LOGIN:
            events.append(
                FeedEvent(
                    type="login",
                    timestamp=activity.timestamp,
                    text=f"{member(activity.user_id)} logged in.",
                )
            )

    events.sort(key=lambda e: _parse_ts(e.timestamp), reverse=True)
    return events[:limit]


class SnapshotRenderer(ViewRenderer):
    """
    Rebuilds a JSON view snapshot on every render.
    """

    def __init__(self) -> None:
        self.revision = 0
        self.latest: ViewSnapshot | None = None

    def render(self, store: EntityStore, session: SessionState) -> None:
        self.revision += 1
        user_id = session.saved_user_id
        user = store.get(Collection.TEAM_MEMBERS, user_id) if user_id else None
        self.latest = ViewSnapshot(
            revision=self.revision,
            view=session.view,
            current_user_id=user.id if user else None,
            current_user_name=user.name if user else None,
            theme=session.theme,
            app_name=store.settings.app_name,
            counts={c.value: store.count(c) for c in RECORD_TYPES},
            activity_feed=build_activity_feed(store),
        )
