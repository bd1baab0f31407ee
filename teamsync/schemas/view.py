# teamsync/schemas/view.py
from pydantic import Field

from teamsync.schemas.base import CamelModel
from teamsync.schemas.session import Theme, View


class FeedEvent(CamelModel):
    """
    One line of the recent-activity feed.
    """

    type: str = Field(..., description="log | completion | login", examples=["login"])
    timestamp: str = Field(..., description="ISO-8601 time the event happened.")
    text: str = Field(..., description="Human-readable description.")


class ViewSnapshot(CamelModel):
    """
    Result of the most recent full view rebuild.

    A new snapshot with a higher revision is produced after every successful
    mutation and after every (re)load.
    """

    revision: int = Field(..., description="Monotonic rebuild counter.", examples=[3])
    view: View = View.DASHBOARD
    current_user_id: str | None = None
    current_user_name: str | None = None
    theme: Theme | None = None
    app_name: str = "TeamSync"
    counts: dict[str, int] = Field(
        default_factory=dict,
        description="Number of records per collection.",
    )
    activity_feed: list[FeedEvent] = Field(
        default_factory=list,
        description="Latest events, newest first.",
    )
