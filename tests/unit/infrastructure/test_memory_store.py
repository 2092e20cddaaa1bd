"""Tests for InMemoryDocumentStore ordering, filters, copies and missing indexes."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from archive_lifecycle.application.document_store import DocumentStoreError, QueryIndexUnavailableError
from archive_lifecycle.infrastructure.store.memory_store import InMemoryDocumentStore


async def test_query_orders_descending_with_missing_values_last():
    store = InMemoryDocumentStore()
    await store.set("c", "old", {"at": datetime(2024, 1, 1, tzinfo=timezone.utc)})
    await store.set("c", "new", {"at": datetime(2024, 2, 1, tzinfo=timezone.utc)})
    await store.set("c", "none", {})

    docs = await store.query("c", order_by="at")

    assert [d.id for d in docs] == ["new", "old", "none"]


async def test_query_on_unindexed_field_raises():
    store = InMemoryDocumentStore(unindexed={"c": ["at"]})

    with pytest.raises(QueryIndexUnavailableError):
        await store.query("c", order_by="at")
    assert await store.query("c", order_by="other") == []


async def test_list_applies_equality_filters():
    store = InMemoryDocumentStore()
    await store.set("billings", "b1", {"archived": True})
    await store.set("billings", "b2", {"archived": False})

    docs = await store.list("billings", {"archived": True})

    assert [d.id for d in docs] == ["b1"]


async def test_documents_are_copied_in_and_out():
    store = InMemoryDocumentStore()
    data = {"tags": ["a"]}
    await store.set("c", "d1", data)
    data["tags"].append("b")

    doc = await store.get("c", "d1")
    doc.data["tags"].append("c")

    assert store.snapshot("c")["d1"] == {"tags": ["a"]}


async def test_add_assigns_unique_ids():
    store = InMemoryDocumentStore()

    ids = {await store.add("c", {}) for _ in range(5)}

    assert len(ids) == 5


async def test_update_missing_document_raises():
    with pytest.raises(DocumentStoreError):
        await InMemoryDocumentStore().update("c", "nope", {"a": 1})


async def test_query_orders_naive_datetimes_in_configured_timezone():
    store = InMemoryDocumentStore(naive_timezone=ZoneInfo("Asia/Manila"))
    await store.set("c", "utc_evening", {"at": datetime(2024, 3, 4, 20, 0, tzinfo=timezone.utc)})
    await store.set("c", "manila_night", {"at": datetime(2024, 3, 5, 1, 0)})

    docs = await store.query("c", order_by="at")

    assert [d.id for d in docs] == ["utc_evening", "manila_night"]
