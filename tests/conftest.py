"""Shared fixtures: in-memory store, engine with a fixed clock, single-location check."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from archive_lifecycle.application.lifecycle_service import LifecycleEngine
from archive_lifecycle.application.name_resolver import ActorNameResolver
from archive_lifecycle.domain.models.kinds import get_descriptor
from archive_lifecycle.domain.models.record import ORIGINAL_ID, RecordKind
from archive_lifecycle.infrastructure.store.memory_store import InMemoryDocumentStore

FIXED_NOW = datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)

# Business field that survives every move; lets tests follow a record across new ids.
REF = "ref"


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def resolver(store, logger):
    return ActorNameResolver(store=store, actor_collection="users", logger=logger)


@pytest.fixture
def engine(store, resolver, logger):
    return LifecycleEngine(
        store=store,
        resolver=resolver,
        logger=logger,
        clock=lambda: FIXED_NOW,
    )


def _belongs(doc_id: str, data: dict, ref: str) -> bool:
    return ref in (doc_id, data.get(ORIGINAL_ID), data.get(REF))


def locations(store: InMemoryDocumentStore, kind: RecordKind, ref: str) -> list[str]:
    """
    Every copy of the record identified by ref, one entry per copy found.
    A document is a copy when its id, its originalId or its ref field equals ref,
    so records restored under a new id are still found.
    """
    descriptor = get_descriptor(kind)
    found = []
    for doc_id, data in store.snapshot(descriptor.active_collection).items():
        if _belongs(doc_id, data, ref):
            found.append("active")
    for doc_id, data in store.snapshot(descriptor.archive_collection).items():
        if _belongs(doc_id, data, ref):
            found.append("archive")
    return found


@pytest.fixture
def where_is(store):
    """where_is(kind, ref) -> list of collections holding a copy of the record."""
    return lambda kind, ref: locations(store, kind, ref)


@pytest.fixture
def fixed_now():
    return FIXED_NOW
