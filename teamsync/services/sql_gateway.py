# teamsync/services/sql_gateway.py
from __future__ import annotations

import uuid
from typing import Any, Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teamsync.db.base import Base  # noqa: F401  # registers ORM models
from teamsync.models.document import StoredDocument
from teamsync.services.gateway import (
    DocumentNotFoundError,
    GatewayError,
    PersistenceGateway,
    split_record,
)


class SqlDocumentGateway(PersistenceGateway):
    """
    Persistence gateway backed by a single SQLAlchemy `documents` table.

    Responsibilities
    ----------------
    - Store schemaless JSON documents keyed by (collection, doc_id).
    - Run each call in its own session and transaction; `batch_write` and
      `batch_delete` commit all rows or none.
    - Translate SQLAlchemy errors into GatewayError so callers never see
      driver details.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def _get(self, session: AsyncSession, collection: str, doc_id: str) -> StoredDocument | None:
        stmt = select(StoredDocument).where(
            StoredDocument.collection == collection,
            StoredDocument.doc_id == doc_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def _next_seq(self, session: AsyncSession, collection: str) -> int:
        stmt = select(func.coalesce(func.max(StoredDocument.seq), 0)).where(
            StoredDocument.collection == collection
        )
        result = await session.execute(stmt)
        return int(result.scalar_one()) + 1

    async def _upsert(
        self,
        session: AsyncSession,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        seq: int,
    ) -> None:
        data = {k: v for k, v in fields.items() if k != "id"}
        existing = await self._get(session, collection, doc_id)
        if existing is None:
            session.add(StoredDocument(collection=collection, doc_id=doc_id, data=data, seq=seq))
        else:
            # Assign a new dict so the JSON column is flagged as modified.
            existing.data = data

    async def get_collection(self, name: str) -> list[dict[str, Any]]:
        try:
            async with self._sessionmaker() as session:
                stmt = (
                    select(StoredDocument)
                    .where(StoredDocument.collection == name)
                    .order_by(StoredDocument.seq, StoredDocument.doc_id)
                )
                result = await session.execute(stmt)
                docs = result.scalars().all()
        except SQLAlchemyError as exc:
            raise GatewayError(f"Failed to read collection '{name}': {exc}") from exc

        return [{"id": doc.doc_id, **(doc.data or {})} for doc in docs]

    async def set_document(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    seq = await self._next_seq(session, collection)
                    await self._upsert(session, collection, doc_id, fields, seq)
        except SQLAlchemyError as exc:
            raise GatewayError(f"Failed to write '{collection}/{doc_id}': {exc}") from exc

    async def update_document(
        self, collection: str, doc_id: str, partial: dict[str, Any]
    ) -> None:
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    existing = await self._get(session, collection, doc_id)
                    if existing is None:
                        raise DocumentNotFoundError(
                            f"No document '{doc_id}' in '{collection}'."
                        )
                    changes = {k: v for k, v in partial.items() if k != "id"}
                    existing.data = {**(existing.data or {}), **changes}
        except SQLAlchemyError as exc:
            raise GatewayError(f"Failed to update '{collection}/{doc_id}': {exc}") from exc

    async def delete_document(self, collection: str, doc_id: str) -> None:
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    await session.execute(
                        delete(StoredDocument).where(
                            StoredDocument.collection == collection,
                            StoredDocument.doc_id == doc_id,
                        )
                    )
        except SQLAlchemyError as exc:
            raise GatewayError(f"Failed to delete '{collection}/{doc_id}': {exc}") from exc

    async def batch_write(self, collection: str, records: list[dict[str, Any]]) -> None:
        if not records:
            return
        prepared = [split_record(record) for record in records]
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    first = await self._next_seq(session, collection)
                    for offset, (doc_id, fields) in enumerate(prepared):
                        await self._upsert(session, collection, doc_id, fields, first + offset)
        except SQLAlchemyError as exc:
            raise GatewayError(f"Batch write to '{collection}' failed: {exc}") from exc

    async def batch_delete(self, collection: str, ids: Iterable[str]) -> None:
        id_list = list(ids)
        if not id_list:
            return
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    await session.execute(
                        delete(StoredDocument).where(
                            StoredDocument.collection == collection,
                            StoredDocument.doc_id.in_(id_list),
                        )
                    )
        except SQLAlchemyError as exc:
            raise GatewayError(f"Batch delete in '{collection}' failed: {exc}") from exc

    async def delete_by_query(self, collection: str, field: str, value: Any) -> int:
        """
        Delete all documents of `collection` whose `field` equals `value`.

        Matching happens on the decoded JSON so the query behaves the same on
        every SQL dialect.
        """
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    result = await session.execute(
                        select(StoredDocument).where(StoredDocument.collection == collection)
                    )
                    matching = [
                        doc.doc_id
                        for doc in result.scalars().all()
                        if (doc.data or {}).get(field) == value
                    ]
                    if matching:
                        await session.execute(
                            delete(StoredDocument).where(
                                StoredDocument.collection == collection,
                                StoredDocument.doc_id.in_(matching),
                            )
                        )
        except SQLAlchemyError as exc:
            raise GatewayError(
                f"Delete by {field}={value!r} in '{collection}' failed: {exc}"
            ) from exc
        return len(matching)

    async def add_document(self, collection: str, fields: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        await self.set_document(collection, doc_id, fields)
        return doc_id
