# teamsync/services/gateway.py
from __future__ import annotations

import copy
import uuid
from abc import ABC, abstractmethod
from typing import Any, Iterable


class GatewayError(RuntimeError):
    """
    Raised when the persistence backend rejects or fails a call.

    Every backend-specific failure is translated into this type so the
    mutation coordinator has a single error to catch.
    """


class DocumentNotFoundError(GatewayError):
    """
    Raised by update_document when the target document does not exist.
    """


class PersistenceGateway(ABC):
    """
    Collection-level CRUD facade over a document store.

    Records returned by `get_collection` carry their key under `id`; the id
    is never stored as a field of the document itself.
    """

    @abstractmethod
    async def get_collection(self, name: str) -> list[dict[str, Any]]:
        """Full read of a collection (no pagination)."""

    @abstractmethod
    async def set_document(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Create or replace a document."""

    @abstractmethod
    async def update_document(
        self, collection: str, doc_id: str, partial: dict[str, Any]
    ) -> None:
        """Merge fields into an existing document; DocumentNotFoundError if missing."""

    @abstractmethod
    async def delete_document(self, collection: str, doc_id: str) -> None:
        """Delete one document. Deleting a missing document is not an error."""

    @abstractmethod
    async def batch_write(self, collection: str, records: list[dict[str, Any]]) -> None:
        """All-or-nothing create-or-replace; each record must carry its own id."""

    @abstractmethod
    async def batch_delete(self, collection: str, ids: Iterable[str]) -> None:
        """Delete several documents at once."""

    @abstractmethod
    async def delete_by_query(self, collection: str, field: str, value: Any) -> int:
        """Delete every document whose `field` equals `value`; returns the count."""

    @abstractmethod
    async def add_document(self, collection: str, fields: dict[str, Any]) -> str:
        """Create a document under a gateway-assigned id and return that id."""


def split_record(record: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    """
    Separate the key from the field set of a batch record.
    """
    doc_id = record.get("id")
    if not doc_id:
        raise GatewayError("Every record in a batch write must carry an 'id'.")
    fields = {k: v for k, v in record.items() if k != "id"}
    return str(doc_id), fields


class InMemoryGateway(PersistenceGateway):
    """
    Process-local document store implementing the gateway contract.

    Used for development (GATEWAY_BACKEND=memory) and as the backend of
    tests. Values are deep-copied on the way in and out so callers can never
    mutate the "durable" copy by accident.
    """

    def __init__(self, initial: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = copy.deepcopy(initial or {})

    def _bucket(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def dump(self, collection: str) -> dict[str, dict[str, Any]]:
        """Raw copy of a collection, for inspection in tests and tooling."""
        return copy.deepcopy(self._collections.get(collection, {}))

    async def get_collection(self, name: str) -> list[dict[str, Any]]:
        return [
            {"id": doc_id, **copy.deepcopy(fields)}
            for doc_id, fields in self._bucket(name).items()
        ]

    async def set_document(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        data = {k: v for k, v in fields.items() if k != "id"}
        self._bucket(collection)[doc_id] = copy.deepcopy(data)

    async def update_document(
        self, collection: str, doc_id: str, partial: dict[str, Any]
    ) -> None:
        bucket = self._bucket(collection)
        if doc_id not in bucket:
            raise DocumentNotFoundError(f"No document '{doc_id}' in '{collection}'.")
        data = {k: v for k, v in partial.items() if k != "id"}
        bucket[doc_id] = {**bucket[doc_id], **copy.deepcopy(data)}

    async def delete_document(self, collection: str, doc_id: str) -> None:
        self._bucket(collection).pop(doc_id, None)

    async def batch_write(self, collection: str, records: list[dict[str, Any]]) -> None:
        # Validate everything first so a bad record leaves nothing written.
        prepared = [split_record(record) for record in records]
        bucket = self._bucket(collection)
        for doc_id, fields in prepared:
            bucket[doc_id] = copy.deepcopy(fields)

    async def batch_delete(self, collection: str, ids: Iterable[str]) -> None:
        bucket = self._bucket(collection)
        for doc_id in ids:
            bucket.pop(doc_id, None)

    async def delete_by_query(self, collection: str, field: str, value: Any) -> int:
        bucket = self._bucket(collection)
        matching = [doc_id for doc_id, data in bucket.items() if data.get(field) == value]
        for doc_id in matching:
            del bucket[doc_id]
        return len(matching)

    async def add_document(self, collection: str, fields: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        await self.set_document(collection, doc_id, fields)
        return doc_id
