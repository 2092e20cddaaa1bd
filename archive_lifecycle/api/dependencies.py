"""FastAPI dependency injection: document store, lifecycle engine, acting user."""

import logging
from typing import Annotated
from zoneinfo import ZoneInfo

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from archive_lifecycle.application.document_store import DocumentStore
from archive_lifecycle.application.lifecycle_service import LifecycleEngine
from archive_lifecycle.application.name_resolver import ActorNameResolver
from archive_lifecycle.config.settings import get_settings
from archive_lifecycle.infrastructure.store.memory_store import InMemoryDocumentStore
from archive_lifecycle.infrastructure.store.session import (
    create_engine,
    create_schema,
    create_session_factory,
)

_document_store: DocumentStore | None = None
_engine: LifecycleEngine | None = None
_sql_engine: AsyncEngine | None = None


def _build_document_store() -> DocumentStore:
    global _sql_engine
    settings = get_settings()
    if settings.store_backend == "redis":
        from archive_lifecycle.infrastructure.store.redis_store import RedisDocumentStore

        return RedisDocumentStore.from_url(settings.redis_url)
    if settings.store_backend == "sql":
        from archive_lifecycle.infrastructure.store.sql_store import SqlDocumentStore

        _sql_engine = create_engine(settings.database_url)
        return SqlDocumentStore(create_session_factory(_sql_engine))
    return InMemoryDocumentStore(naive_timezone=ZoneInfo(settings.local_timezone))


def get_document_store() -> DocumentStore:
    """Return singleton document store for the configured backend."""
    global _document_store
    if _document_store is None:
        _document_store = _build_document_store()
    return _document_store


def get_lifecycle_engine(
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> LifecycleEngine:
    """
    Return the process-wide engine. Its view state and name cache are the session:
    they live until the process restarts.
    """
    global _engine
    if _engine is None:
        settings = get_settings()
        logger = logging.getLogger("archive_lifecycle.lifecycle")
        resolver = ActorNameResolver(
            store=store,
            actor_collection=f"{settings.collection_prefix}{settings.actor_collection}",
            logger=logger,
            unknown_name=settings.unknown_actor_name,
        )
        _engine = LifecycleEngine(
            store=store,
            resolver=resolver,
            logger=logger,
            collection_prefix=settings.collection_prefix,
            timezone_name=settings.local_timezone,
        )
    return _engine


async def prepare_document_store() -> None:
    """Build the configured store; the sql backend also gets its documents table."""
    get_document_store()
    if _sql_engine is not None:
        await create_schema(_sql_engine)


async def close_document_store() -> None:
    """Dispose the sql engine, if any, and forget the cached store and engine."""
    if _sql_engine is not None:
        await _sql_engine.dispose()
    reset_singletons()


def reset_singletons() -> None:
    """Forget the cached store and engine (tests, reload)."""
    global _document_store, _engine, _sql_engine
    _document_store = None
    _engine = None
    _sql_engine = None


def get_actor_id(request: Request) -> str | None:
    """Extract actor id from request.state (set by middleware)."""
    return getattr(request.state, "actor_id", None)
