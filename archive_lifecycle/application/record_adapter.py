"""Record Store Adapter: uniform access to one logical collection, with ordered-query fallback."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from archive_lifecycle.application.document_store import (
    DocumentStore,
    DocumentStoreError,
    StoredDocument,
)
from archive_lifecycle.application.exceptions import StoreTransportError
from archive_lifecycle.domain.models.record import ArchivableRecord, LifecycleState, RecordKind


@dataclass
class OrderedListing:
    """Records from listOrdered. sorted_by is None when every ordered attempt failed."""

    records: List[ArchivableRecord]
    sorted_by: Optional[str]

    @property
    def needs_local_sort(self) -> bool:
        return self.sorted_by is None


class RecordStoreAdapter:
    """
    One collection of one record kind. Records read through this adapter carry the
    lifecycle state of the collection it serves. Store failures surface as
    StoreTransportError; a missing record is None, never an exception.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        kind: RecordKind,
        state: LifecycleState,
        logger: logging.Logger,
    ) -> None:
        self._store = store
        self._collection = collection
        self._kind = kind
        self._state = state
        self._logger = logger

    @property
    def collection(self) -> str:
        return self._collection

    def _to_record(self, doc: StoredDocument) -> ArchivableRecord:
        return ArchivableRecord(id=doc.id, kind=self._kind, payload=dict(doc.data), state=self._state)

    def _transport_error(self, operation: str, exc: Exception) -> StoreTransportError:
        self._logger.error(
            "store_operation_failed",
            extra={
                "operation": operation,
                "collection": self._collection,
                "error": str(exc),
            },
        )
        return StoreTransportError(
            f"{operation} on {self._collection} failed: {exc}",
            operation=operation,
            collection=self._collection,
        )

    async def list(self, filters: Optional[Mapping[str, Any]] = None) -> List[ArchivableRecord]:
        try:
            docs = await self._store.list(self._collection, filters)
        except DocumentStoreError as e:
            raise self._transport_error("list", e) from e
        return [self._to_record(d) for d in docs]

    async def list_ordered(
        self,
        sort_field: str,
        descending: bool = True,
        secondary_sort_field: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> OrderedListing:
        """
        Ordered query that degrades: sort_field, then secondary_sort_field if given,
        then an unordered list() the caller must sort in memory.
        """
        attempts = [sort_field]
        if secondary_sort_field and secondary_sort_field != sort_field:
            attempts.append(secondary_sort_field)

        for field_name in attempts:
            try:
                docs = await self._store.query(
                    self._collection,
                    order_by=field_name,
                    descending=descending,
                    filters=filters,
                )
            except DocumentStoreError as e:
                self._logger.warning(
                    "ordered_query_fallback",
                    extra={
                        "collection": self._collection,
                        "order_by": field_name,
                        "error": str(e),
                    },
                )
                continue
            return OrderedListing(records=[self._to_record(d) for d in docs], sorted_by=field_name)

        return OrderedListing(records=await self.list(filters), sorted_by=None)

    async def get(self, record_id: str) -> Optional[ArchivableRecord]:
        try:
            doc = await self._store.get(self._collection, record_id)
        except DocumentStoreError as e:
            raise self._transport_error("get", e) from e
        return self._to_record(doc) if doc is not None else None

    async def create(self, fields: Mapping[str, Any], record_id: Optional[str] = None) -> str:
        """Write a new record. With record_id the write targets that id; otherwise the store assigns one."""
        data: Dict[str, Any] = dict(fields)
        try:
            if record_id is None:
                return await self._store.add(self._collection, data)
            await self._store.set(self._collection, record_id, data)
            return record_id
        except DocumentStoreError as e:
            raise self._transport_error("create", e) from e

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> None:
        try:
            await self._store.update(self._collection, record_id, dict(fields))
        except DocumentStoreError as e:
            raise self._transport_error("update", e) from e

    async def delete(self, record_id: str) -> None:
        """Idempotent: deleting an absent record succeeds."""
        try:
            await self._store.delete(self._collection, record_id)
        except DocumentStoreError as e:
            raise self._transport_error("delete", e) from e
