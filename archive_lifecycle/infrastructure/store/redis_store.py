"""
Redis-backed document store. Each document is a JSON string under doc:{collection}:{id};
ids:{collection} is the set of ids in the collection. There are no sort indexes, so
ordered queries always raise QueryIndexUnavailableError and callers sort in memory.
"""

import uuid
from typing import Any, List, Mapping, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from archive_lifecycle.application.document_store import (
    DocumentStoreError,
    QueryIndexUnavailableError,
    StoredDocument,
)
from archive_lifecycle.infrastructure.store.serialization import dumps, loads, matches_filters

DOC_PREFIX = "doc:"
IDS_PREFIX = "ids:"


class RedisDocumentStore:
    """Implements DocumentStore on a redis.asyncio client (decode_responses=True)."""

    def __init__(self, client: Any, key_prefix: str = "") -> None:
        self._client = client
        self._prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "") -> "RedisDocumentStore":
        return cls(redis.from_url(url, decode_responses=True), key_prefix=key_prefix)

    def _doc_key(self, collection: str, doc_id: str) -> str:
        return f"{self._prefix}{DOC_PREFIX}{collection}:{doc_id}"

    def _ids_key(self, collection: str) -> str:
        return f"{self._prefix}{IDS_PREFIX}{collection}"

    async def list(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[StoredDocument]:
        try:
            ids = sorted(await self._client.smembers(self._ids_key(collection)))
            if not ids:
                return []
            raws = await self._client.mget([self._doc_key(collection, i) for i in ids])
        except RedisError as e:
            raise DocumentStoreError(f"redis list {collection} failed: {e}") from e
        docs: List[StoredDocument] = []
        for doc_id, raw in zip(ids, raws):
            if raw is None:
                continue
            data = loads(raw)
            if matches_filters(data, filters):
                docs.append(StoredDocument(id=doc_id, data=data))
        return docs

    async def query(
        self,
        collection: str,
        order_by: str,
        descending: bool = True,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[StoredDocument]:
        raise QueryIndexUnavailableError(
            f"redis store has no sort index for {collection}.{order_by}"
        )

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        try:
            raw = await self._client.get(self._doc_key(collection, doc_id))
        except RedisError as e:
            raise DocumentStoreError(f"redis get {collection}/{doc_id} failed: {e}") from e
        if raw is None:
            return None
        return StoredDocument(id=doc_id, data=loads(raw))

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        await self.set(collection, doc_id, data)
        return doc_id

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        # MULTI/EXEC: the document and its id-set entry land together or not at all.
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.set(self._doc_key(collection, doc_id), dumps(data))
                pipe.sadd(self._ids_key(collection), doc_id)
                await pipe.execute()
        except RedisError as e:
            raise DocumentStoreError(f"redis set {collection}/{doc_id} failed: {e}") from e

    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        current = await self.get(collection, doc_id)
        if current is None:
            raise DocumentStoreError(f"No document to update: {collection}/{doc_id}")
        await self.set(collection, doc_id, {**current.data, **fields})

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(self._doc_key(collection, doc_id))
                pipe.srem(self._ids_key(collection), doc_id)
                await pipe.execute()
        except RedisError as e:
            raise DocumentStoreError(f"redis delete {collection}/{doc_id} failed: {e}") from e
