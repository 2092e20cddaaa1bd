"""In-memory document store. Process-local; used for development and tests."""

import copy
import uuid
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from archive_lifecycle.application.document_store import (
    DocumentStoreError,
    QueryIndexUnavailableError,
    StoredDocument,
)
from archive_lifecycle.infrastructure.store.serialization import matches_filters


def _order_key(value: Any, naive_timezone: tzinfo) -> Tuple[int, Any]:
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (1, float(value))
    if isinstance(value, datetime):
        moment = value if value.tzinfo is not None else value.replace(tzinfo=naive_timezone)
        return (2, moment.timestamp())
    return (3, str(value))


class InMemoryDocumentStore:
    """
    Implements DocumentStore over nested dicts. Documents are deep-copied in and out.
    unindexed maps collection -> fields that ordered queries may not use, to mimic
    a store with missing sort indexes. Naive datetimes are ordered as wall time in
    naive_timezone.
    """

    def __init__(
        self,
        unindexed: Optional[Mapping[str, Iterable[str]]] = None,
        naive_timezone: tzinfo = timezone.utc,
    ) -> None:
        self._naive_timezone = naive_timezone
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._unindexed = {c: frozenset(f) for c, f in (unindexed or {}).items()}

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def snapshot(self, collection: str) -> Dict[str, Dict[str, Any]]:
        """Copy of every document in collection, keyed by id."""
        return copy.deepcopy(self._collection(collection))

    async def list(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[StoredDocument]:
        return [
            StoredDocument(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if matches_filters(data, filters)
        ]

    async def query(
        self,
        collection: str,
        order_by: str,
        descending: bool = True,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[StoredDocument]:
        if order_by in self._unindexed.get(collection, frozenset()):
            raise QueryIndexUnavailableError(
                f"The query requires an index on {collection}.{order_by}"
            )
        docs = await self.list(collection, filters)
        return sorted(
            docs,
            key=lambda d: _order_key(d.data.get(order_by), self._naive_timezone),
            reverse=descending,
        )

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return StoredDocument(id=doc_id, data=copy.deepcopy(data))

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        self._collection(collection)[doc_id] = copy.deepcopy(dict(data))
        return doc_id

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self._collection(collection)[doc_id] = copy.deepcopy(dict(data))

    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentStoreError(f"No document to update: {collection}/{doc_id}")
        docs[doc_id].update(copy.deepcopy(dict(fields)))

    async def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)
