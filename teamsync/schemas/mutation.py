# teamsync/schemas/mutation.py
from typing import Any

from pydantic import Field

from teamsync.schemas.base import CamelModel


class MutationResponse(CamelModel):
    """
    Body returned by every successful write endpoint.
    """

    entity: str = Field(..., description="Entity type that was written.", examples=["project"])
    ok: bool = True
    data: Any = Field(None, description="Affected record(s), id(s) or count.")
    warnings: list[str] = Field(
        default_factory=list,
        description="Best-effort follow-ups that did not complete (activity feed, fan-out deletes).",
    )
    revision: int | None = Field(
        None,
        description="Revision of the view snapshot rebuilt after the write.",
    )
