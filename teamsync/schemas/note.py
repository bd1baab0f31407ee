# teamsync/schemas/note.py
from enum import Enum

from pydantic import Field

from teamsync.schemas.base import Record


class NoteStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class Note(Record):
    """
    A personal note. `user_id` is set to the acting user at creation and
    never changes afterwards.
    """

    title: str
    content: str = ""
    status: NoteStatus = NoteStatus.PENDING
    due_date: str | None = None
    tags: list[str] = Field(default_factory=list)
    color: str = "#ffffff"
    user_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
