# teamsync/schemas/base.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Collection(str, Enum):
    """
    Names of the document collections shared by the gateway and the store.
    """

    PROJECTS = "projects"
    ATTENDANCE = "attendance"
    NOTES = "notes"
    WORK_LOGS = "worklogs"
    TEAM_MEMBERS = "teamMembers"
    ACTIVITIES = "activities"
    SETTINGS = "settings"


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """
    Current UTC time as an ISO-8601 string with millisecond precision.
    """
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    """
    Base for every persisted shape.

    Attributes are snake_case in Python; the stored and JSON form uses the
    camelCase keys of the document store (`memberId`, `dueDate`, ...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        use_enum_values=False,
    )


class Record(CamelModel):
    """
    A document identified by an opaque string id.

    The id is the document key: it is never part of the persisted field set.
    """

    # Fields computed at load time that must not reach the gateway.
    derived_fields: ClassVar[frozenset[str]] = frozenset()

    id: str = Field(default_factory=new_id, description="Opaque unique identifier.")

    def to_document(self) -> dict[str, Any]:
        """
        Field set sent to the gateway: camelCase keys, JSON-ready values,
        without the id and without derived fields.
        """
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id", *self.derived_fields},
        )

    def to_public(self) -> dict[str, Any]:
        """
        JSON representation including the id, used by exports and the API.
        """
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, doc: dict[str, Any]):
        return cls.model_validate(doc)
