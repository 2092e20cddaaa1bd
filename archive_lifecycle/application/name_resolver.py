"""Actor Name Resolver. One point lookup per distinct actor id per session, cached in memory."""

import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from archive_lifecycle.application.document_store import DocumentStore, DocumentStoreError
from archive_lifecycle.domain.models.kinds import KindDescriptor
from archive_lifecycle.domain.models.record import ArchivableRecord

DEFAULT_UNKNOWN_NAME = "Unknown"


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def display_name(fields: Mapping[str, Any]) -> Optional[str]:
    """
    Display name from an actor-shaped field map: fullName, else "firstName lastName",
    else email, else phone. None when none of them is present.
    """
    full_name = _text(fields.get("fullName"))
    if full_name:
        return full_name
    joined = f"{_text(fields.get('firstName'))} {_text(fields.get('lastName'))}".strip()
    if joined:
        return joined
    for key in ("email", "phone"):
        value = _text(fields.get(key))
        if value:
            return value
    return None


def embedded_contact(record: ArchivableRecord, descriptor: KindDescriptor) -> Optional[str]:
    """First non-empty contact string captured on the record itself."""
    for key in descriptor.contact_fields:
        value = _text(record.payload.get(key))
        if value:
            return value
    return None


class ActorNameResolver:
    """
    Resolves actor references to display names for a batch of records.

    The cache lives as long as the resolver (one per session) and is keyed by
    actor id. Lookups for distinct ids run concurrently; a lookup already in
    flight for an id is shared rather than repeated.
    """

    def __init__(
        self,
        store: DocumentStore,
        actor_collection: str,
        logger: logging.Logger,
        unknown_name: str = DEFAULT_UNKNOWN_NAME,
    ) -> None:
        self._store = store
        self._actor_collection = actor_collection
        self._logger = logger
        self._unknown_name = unknown_name
        self._cache: Dict[str, str] = {}
        self._pending: Dict[str, "asyncio.Task[Optional[str]]"] = {}

    @property
    def unknown_name(self) -> str:
        return self._unknown_name

    def cached(self, actor_id: str) -> Optional[str]:
        return self._cache.get(actor_id)

    def clear(self) -> None:
        """Drop every cached name (e.g. when the view is reloaded)."""
        self._cache.clear()

    async def _lookup(self, actor_id: str) -> Optional[str]:
        try:
            doc = await self._store.get(self._actor_collection, actor_id)
        except DocumentStoreError as e:
            self._logger.warning(
                "actor_lookup_failed",
                extra={"actor_ref": actor_id, "error": str(e)},
            )
            return None
        if doc is None:
            self._logger.info("actor_not_found", extra={"actor_ref": actor_id})
            return None
        return display_name(doc.data)

    async def _lookup_once(self, actor_id: str) -> Optional[str]:
        task = self._pending.get(actor_id)
        if task is None:
            task = asyncio.ensure_future(self._lookup(actor_id))
            self._pending[actor_id] = task
        try:
            return await task
        finally:
            self._pending.pop(actor_id, None)

    async def resolve(
        self,
        records: Iterable[ArchivableRecord],
        descriptor: KindDescriptor,
    ) -> Dict[str, str]:
        """
        Return record id -> display name for the batch. Every lookup completes
        before this returns. Kinds without an actor get an empty name.
        """
        batch = list(records)
        if descriptor.self_named:
            return {
                r.id: display_name(r.payload) or self._unknown_name
                for r in batch
            }
        if descriptor.actor_field is None:
            return {r.id: "" for r in batch}

        refs: Dict[str, str] = {}
        first_record: Dict[str, ArchivableRecord] = {}
        for record in batch:
            actor_id = _text(record.payload.get(descriptor.actor_field))
            if not actor_id:
                continue
            refs[record.id] = actor_id
            first_record.setdefault(actor_id, record)

        missing = [a for a in first_record if a not in self._cache]
        if missing:
            found = await asyncio.gather(*(self._lookup_once(a) for a in missing))
            for actor_id, name in zip(missing, found):
                if actor_id in self._cache:
                    continue
                self._cache[actor_id] = (
                    name
                    or embedded_contact(first_record[actor_id], descriptor)
                    or self._unknown_name
                )
            self._logger.info(
                "actor_names_resolved",
                extra={
                    "kind": descriptor.kind.value,
                    "lookups": len(missing),
                    "distinct_actors": len(first_record),
                },
            )

        names: Dict[str, str] = {}
        for record in batch:
            actor_id = refs.get(record.id)
            if actor_id is not None:
                names[record.id] = self._cache[actor_id]
            else:
                names[record.id] = embedded_contact(record, descriptor) or self._unknown_name
        return names
