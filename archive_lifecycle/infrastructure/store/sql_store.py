"""SQL-backed document store. One row per document in the documents table (JSON column)."""

import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from archive_lifecycle.application.document_store import DocumentStoreError, StoredDocument
from archive_lifecycle.infrastructure.store.models import DocumentRow
from archive_lifecycle.infrastructure.store.serialization import (
    DATETIME_TAG,
    decode_value,
    encode_value,
    matches_filters,
)


class SqlDocumentStore:
    """
    Implements DocumentStore with SQLAlchemy async sessions, one session per call.
    Equality filters are applied after decoding so that tagged values compare as Python objects.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    def _to_docs(self, rows, filters: Optional[Mapping[str, Any]]) -> List[StoredDocument]:
        docs: List[StoredDocument] = []
        for row in rows:
            data = decode_value(row.data)
            if matches_filters(data, filters):
                docs.append(StoredDocument(id=row.doc_id, data=data))
        return docs

    async def list(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[StoredDocument]:
        stmt = select(DocumentRow).where(DocumentRow.collection == collection)
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"sql list {collection} failed: {e}") from e
        return self._to_docs(rows, filters)

    async def query(
        self,
        collection: str,
        order_by: str,
        descending: bool = True,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[StoredDocument]:
        # Datetimes are stored as {"__datetime__": iso}; plain values sort by their text.
        # Documents without the field sort last in either direction.
        sort_value = func.coalesce(
            DocumentRow.data[(order_by, DATETIME_TAG)].as_string(),
            DocumentRow.data[(order_by,)].as_string(),
        )
        stmt = (
            select(DocumentRow)
            .where(DocumentRow.collection == collection)
            .order_by((sort_value.desc() if descending else sort_value.asc()).nulls_last())
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"sql query {collection} by {order_by} failed: {e}") from e
        return self._to_docs(rows, filters)

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        try:
            async with self._session_factory() as session:
                row = await session.get(DocumentRow, (collection, doc_id))
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"sql get {collection}/{doc_id} failed: {e}") from e
        if row is None:
            return None
        return StoredDocument(id=row.doc_id, data=decode_value(row.data))

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        await self.set(collection, doc_id, data)
        return doc_id

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        try:
            async with self._session_factory() as session:
                row = await session.get(DocumentRow, (collection, doc_id))
                if row is None:
                    session.add(
                        DocumentRow(collection=collection, doc_id=doc_id, data=encode_value(data))
                    )
                else:
                    row.data = encode_value(data)
                await session.commit()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"sql set {collection}/{doc_id} failed: {e}") from e

    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        try:
            async with self._session_factory() as session:
                row = await session.get(DocumentRow, (collection, doc_id))
                if row is None:
                    raise DocumentStoreError(f"No document to update: {collection}/{doc_id}")
                row.data = {**row.data, **encode_value(fields)}
                await session.commit()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"sql update {collection}/{doc_id} failed: {e}") from e

    async def delete(self, collection: str, doc_id: str) -> None:
        stmt = delete(DocumentRow).where(
            DocumentRow.collection == collection,
            DocumentRow.doc_id == doc_id,
        )
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"sql delete {collection}/{doc_id} failed: {e}") from e
