"""Tests for RedisDocumentStore against an in-memory stand-in for the redis client."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from archive_lifecycle.application.document_store import DocumentStoreError, QueryIndexUnavailableError
from archive_lifecycle.application.lifecycle_result import LifecycleOutcome
from archive_lifecycle.application.lifecycle_service import LifecycleEngine
from archive_lifecycle.application.name_resolver import ActorNameResolver
from archive_lifecycle.application.record_adapter import RecordStoreAdapter
from archive_lifecycle.domain.models.record import LifecycleState, RecordKind
from archive_lifecycle.infrastructure.store.redis_store import RedisDocumentStore


class FakePipeline:
    """Queues commands and applies them all on execute, or none if any command is failing."""

    def __init__(self, client):
        self._client = client
        self._commands = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self._commands = []
        return False

    def __getattr__(self, name):
        def queue(*args):
            self._commands.append((name, args))
            return self

        return queue

    async def execute(self):
        failing = [name for name, _ in self._commands if name in self._client.failing]
        if failing:
            raise RedisConnectionError(f"connection lost during EXEC ({failing[0]})")
        return [await getattr(self._client, name)(*args) for name, args in self._commands]


class FakeRedis:
    """In-memory subset of redis.asyncio.Redis used by RedisDocumentStore."""

    def __init__(self):
        self._strings: dict[str, str] = {}
        self._sets: dict[str, set[str]] = {}
        self.failing: set[str] = set()

    def pipeline(self, transaction=True):
        return FakePipeline(self)

    async def get(self, key):
        return self._strings.get(key)

    async def mget(self, keys):
        return [self._strings.get(k) for k in keys]

    async def set(self, key, value):
        self._strings[key] = value

    async def delete(self, key):
        return 1 if self._strings.pop(key, None) is not None else 0

    async def sadd(self, key, member):
        self._sets.setdefault(key, set()).add(member)

    async def srem(self, key, member):
        self._sets.get(key, set()).discard(member)

    async def smembers(self, key):
        return set(self._sets.get(key, set()))

    def doc_keys(self, collection):
        return [k for k in self._strings if f"doc:{collection}:" in k]


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_store(fake_redis):
    return RedisDocumentStore(fake_redis, key_prefix="test:")


async def test_set_get_round_trip_keeps_datetimes(redis_store):
    archived_at = datetime(2024, 3, 5, 23, 59, tzinfo=timezone.utc)

    await redis_store.set("archivedComplaints", "a1", {"archivedAt": archived_at, "subject": "Noise"})
    doc = await redis_store.get("archivedComplaints", "a1")

    assert doc.data == {"archivedAt": archived_at, "subject": "Noise"}


async def test_keys_are_namespaced(redis_store, fake_redis):
    await redis_store.set("complaints", "c1", {})

    assert "test:doc:complaints:c1" in fake_redis._strings
    assert fake_redis._sets["test:ids:complaints"] == {"c1"}


async def test_list_and_delete(redis_store):
    doc_id = await redis_store.add("complaints", {"status": "pending"})
    await redis_store.add("complaints", {"status": "resolved"})

    pending = await redis_store.list("complaints", {"status": "pending"})
    await redis_store.delete("complaints", doc_id)
    await redis_store.delete("complaints", doc_id)

    assert [d.id for d in pending] == [doc_id]
    assert len(await redis_store.list("complaints")) == 1
    assert await redis_store.get("complaints", doc_id) is None


async def test_ordered_query_is_unavailable(redis_store):
    with pytest.raises(QueryIndexUnavailableError):
        await redis_store.query("complaints", order_by="createdAt")


async def test_adapter_degrades_to_unordered_list(redis_store, logger):
    await redis_store.set("archivedComplaints", "a1", {})
    adapter = RecordStoreAdapter(
        store=redis_store,
        collection="archivedComplaints",
        kind=RecordKind.COMPLAINTS,
        state=LifecycleState.ARCHIVED,
        logger=logger,
    )

    listing = await adapter.list_ordered("archivedAt", secondary_sort_field="createdAt")

    assert listing.needs_local_sort
    assert [r.id for r in listing.records] == ["a1"]


async def test_update_merges(redis_store):
    await redis_store.set("users", "u1", {"fullName": "Ana", "email": "a@example.com"})

    await redis_store.update("users", "u1", {"fullName": "Ana Cruz"})

    assert (await redis_store.get("users", "u1")).data == {"fullName": "Ana Cruz", "email": "a@example.com"}


async def test_redis_errors_become_document_store_errors(fake_redis, redis_store):
    fake_redis.get = AsyncMock(side_effect=RedisConnectionError("refused"))

    with pytest.raises(DocumentStoreError):
        await redis_store.get("users", "u1")


async def test_failed_id_set_write_leaves_no_document(fake_redis, redis_store):
    fake_redis.failing = {"sadd"}

    with pytest.raises(DocumentStoreError):
        await redis_store.set("archivedComplaints", "a1", {"subject": "Noise"})

    assert fake_redis.doc_keys("archivedComplaints") == []
    assert await redis_store.get("archivedComplaints", "a1") is None


async def test_failed_id_set_removal_keeps_document(fake_redis, redis_store):
    await redis_store.set("complaints", "c1", {"subject": "Noise"})
    fake_redis.failing = {"srem"}

    with pytest.raises(DocumentStoreError):
        await redis_store.delete("complaints", "c1")

    assert [d.id for d in await redis_store.list("complaints")] == ["c1"]
    assert await redis_store.get("complaints", "c1") is not None


async def test_failed_archive_write_leaves_no_hidden_archive_copy(fake_redis, redis_store, logger):
    resolver = ActorNameResolver(redis_store, "users", logger)
    engine = LifecycleEngine(store=redis_store, resolver=resolver, logger=logger)
    await redis_store.set("complaints", "R1", {"subject": "Noise", "userId": "U1"})
    fake_redis.failing = {"sadd"}

    result = await engine.archive(RecordKind.COMPLAINTS, "R1")

    assert result.outcome is LifecycleOutcome.FAILED
    assert fake_redis.doc_keys("archivedComplaints") == []
    assert await redis_store.list("archivedComplaints") == []
    assert [d.id for d in await redis_store.list("complaints")] == ["R1"]
