"""Document store protocol. Application layer depends on this; infrastructure implements it."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol


class DocumentStoreError(Exception):
    """Transport-level failure raised by a document store client."""


class QueryIndexUnavailableError(DocumentStoreError):
    """Raised when the store cannot serve an ordered query (e.g. missing index)."""


@dataclass(frozen=True)
class StoredDocument:
    """A document as returned by the store: its id and field map."""

    id: str
    data: Dict[str, Any]


class DocumentStore(Protocol):
    """
    Per-collection CRUD and queries. No multi-document transactions.
    delete() of an absent document is a no-op, not an error.
    """

    async def list(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[StoredDocument]:
        """Return all documents matching the equality filters, in no particular order."""
        ...

    async def query(
        self,
        collection: str,
        order_by: str,
        descending: bool = True,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[StoredDocument]:
        """Return matching documents ordered by order_by. May raise QueryIndexUnavailableError."""
        ...

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        """Return the document, or None if it does not exist."""
        ...

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        """Create a document with a store-assigned id. Returns the id."""
        ...

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Create or overwrite the document with the given id."""
        ...

    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        """Merge fields into an existing document."""
        ...

    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete the document if present."""
        ...
