"""
Lifecycle Engine: archive/restore moves between a kind's active and archive collections.

The two collections are never written atomically. Every move writes the destination
before deleting the source, so a failure part-way leaves a duplicate, never a loss.
Delete is idempotent, so retrying a partially completed move converges.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from archive_lifecycle.application.document_store import DocumentStore
from archive_lifecycle.application.exceptions import (
    LifecycleError,
    OperationInProgressError,
    PartialFailureError,
    RecordNotFoundError,
    StoreTransportError,
    TransportFailureError,
)
from archive_lifecycle.application.lifecycle_result import (
    LifecycleAction,
    LifecycleOutcome,
    LifecycleResult,
)
from archive_lifecycle.application.name_resolver import ActorNameResolver
from archive_lifecycle.application.projector import apply_filter, sort_newest_first
from archive_lifecycle.application.record_adapter import RecordStoreAdapter
from archive_lifecycle.application.view_state import KindView, ViewState
from archive_lifecycle.core.context import actor_id_ctx
from archive_lifecycle.domain.models.kinds import KindDescriptor, get_descriptor
from archive_lifecycle.domain.models.record import (
    ARCHIVED_AT,
    ARCHIVED_BY,
    LIFECYCLE_FIELDS,
    ORIGINAL_ID,
    UPDATED_AT,
    ArchivableRecord,
    FilterCriteria,
    LifecycleState,
    RecordKind,
    RecordView,
    validate_transition,
)

UNKNOWN_ACTOR = "unknown"
STORE_UNAVAILABLE = "the record store is unavailable, please try again"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleEngine:
    """
    One engine for every record kind, parameterized by KindDescriptor.
    Holds the session's view state and name cache; failures never touch the view.
    """

    def __init__(
        self,
        store: DocumentStore,
        resolver: ActorNameResolver,
        logger: logging.Logger,
        *,
        view: Optional[ViewState] = None,
        clock: Callable[[], datetime] = _utc_now,
        collection_prefix: str = "",
        timezone_name: str = "UTC",
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._logger = logger
        self._view = view or ViewState()
        self._clock = clock
        self._prefix = collection_prefix
        self._tz = ZoneInfo(timezone_name)
        self._adapters: Dict[Tuple[RecordKind, LifecycleState], RecordStoreAdapter] = {}

    @property
    def view(self) -> ViewState:
        return self._view

    def adapter(self, kind: RecordKind, state: LifecycleState) -> RecordStoreAdapter:
        """Adapter for the collection that holds records of kind in state (ACTIVE or ARCHIVED)."""
        key = (kind, state)
        if key not in self._adapters:
            descriptor = get_descriptor(kind)
            if state is LifecycleState.ACTIVE:
                collection = descriptor.active_collection
            elif state is LifecycleState.ARCHIVED:
                collection = descriptor.archive_collection
            else:
                raise ValueError(f"No collection holds records in transient state {state.value}")
            self._adapters[key] = RecordStoreAdapter(
                store=self._store,
                collection=f"{self._prefix}{collection}",
                kind=kind,
                state=state,
                logger=self._logger,
            )
        return self._adapters[key]

    # ------------------------------------------------------------------
    # Listing and filtering
    # ------------------------------------------------------------------

    async def _load(
        self,
        descriptor: KindDescriptor,
        state: LifecycleState,
    ) -> Tuple[List[ArchivableRecord], Dict[str, str]]:
        adapter = self.adapter(descriptor.kind, state)
        if state is LifecycleState.ACTIVE:
            listing = await adapter.list_ordered(descriptor.active_sort_field, descending=True)
        else:
            listing = await adapter.list_ordered(
                descriptor.archive_sort_field,
                descending=True,
                secondary_sort_field=descriptor.archive_secondary_sort_field,
            )
        records = listing.records
        if listing.needs_local_sort:
            fields = descriptor.local_sort_fields(archived=state is LifecycleState.ARCHIVED)
            records = sort_newest_first(records, fields, self._tz)
        records = [r for r in records if not descriptor.is_excluded(r.payload)]
        names = await self._resolver.resolve(records, descriptor)
        return records, names

    async def _list(self, kind: RecordKind, state: LifecycleState) -> List[RecordView]:
        descriptor = get_descriptor(kind)
        try:
            records, names = await self._load(descriptor, state)
        except StoreTransportError as e:
            action = f"load {state.value}"
            raise TransportFailureError(
                f"Failed to load {state.value} {descriptor.label} records: {STORE_UNAVAILABLE}",
                kind=kind,
                action=action,
                record_id="",
                cause=e,
            ) from e

        kind_view = self._view.for_kind(kind)
        if state is LifecycleState.ACTIVE:
            kind_view.active = records
        else:
            kind_view.archived = records
        kind_view.names.update(names)
        self._logger.info(
            "records_listed",
            extra={"kind": kind.value, "state": state.value, "count": len(records)},
        )
        return [RecordView(record=r, display_name=names.get(r.id, "")) for r in records]

    async def list_active(self, kind: RecordKind) -> List[RecordView]:
        """Fetch the active collection, resolve names, and replace the active view."""
        return await self._list(kind, LifecycleState.ACTIVE)

    async def list_archived(self, kind: RecordKind) -> List[RecordView]:
        """Fetch the archive collection, resolve names, and replace the archived view."""
        return await self._list(kind, LifecycleState.ARCHIVED)

    def apply_filter(
        self,
        kind: RecordKind,
        criteria: FilterCriteria,
        state: LifecycleState = LifecycleState.ARCHIVED,
    ) -> List[RecordView]:
        """Project the last loaded list of kind through the date and text filters."""
        descriptor = get_descriptor(kind)
        kind_view = self._view.for_kind(kind)
        records = kind_view.active if state is LifecycleState.ACTIVE else kind_view.archived
        return apply_filter(records, kind_view.names, criteria, descriptor, self._tz)

    async def fetch_archived(self, kind: RecordKind, criteria: FilterCriteria) -> List[RecordView]:
        """list_archived followed by apply_filter; names are resolved before projecting."""
        await self.list_archived(kind)
        return self.apply_filter(kind, criteria)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _result(
        self,
        outcome: LifecycleOutcome,
        descriptor: KindDescriptor,
        action: LifecycleAction,
        record_id: str,
        message: str,
        record: Optional[ArchivableRecord] = None,
        error: Optional[LifecycleError] = None,
    ) -> LifecycleResult:
        return LifecycleResult(
            outcome=outcome,
            kind=descriptor.kind,
            action=action,
            record_id=record_id,
            message=message,
            record=record,
            error=error,
        )

    def _failed(
        self,
        descriptor: KindDescriptor,
        action: LifecycleAction,
        record_id: str,
        error_cls: type,
        reason: str,
        cause: Optional[BaseException] = None,
    ) -> LifecycleResult:
        message = f"Failed to {action.value} {descriptor.label}: {reason}"
        error = error_cls(
            message,
            kind=descriptor.kind,
            action=action.value,
            record_id=record_id,
            cause=cause,
        )
        self._logger.error(
            f"{action.value}_failed",
            extra={
                "kind": descriptor.kind.value,
                "record_id": record_id,
                "error_type": error_cls.__name__,
                "error": str(cause) if cause is not None else reason,
            },
        )
        return self._result(LifecycleOutcome.FAILED, descriptor, action, record_id, message, error=error)

    def _partial(
        self,
        descriptor: KindDescriptor,
        action: LifecycleAction,
        record_id: str,
        written: ArchivableRecord,
        cause: StoreTransportError,
    ) -> LifecycleResult:
        destination = "archive" if action is LifecycleAction.ARCHIVE else "active list"
        source = "active list" if action is LifecycleAction.ARCHIVE else "archive"
        message = (
            f"The {descriptor.label} was copied to the {destination} but could not be "
            f"removed from the {source}; a duplicate may exist. Retry to finish the {action.value}."
        )
        error = PartialFailureError(
            message,
            kind=descriptor.kind,
            action=action.value,
            record_id=record_id,
            cause=cause,
        )
        self._logger.error(
            f"{action.value}_partial_failure",
            extra={
                "kind": descriptor.kind.value,
                "record_id": record_id,
                "written_id": written.id,
                "error": str(cause),
            },
        )
        return self._result(
            LifecycleOutcome.PARTIALLY_COMPLETED,
            descriptor,
            action,
            record_id,
            message,
            record=written,
            error=error,
        )

    def _in_progress(
        self,
        descriptor: KindDescriptor,
        action: LifecycleAction,
        record_id: str,
    ) -> LifecycleResult:
        return self._failed(
            descriptor,
            action,
            record_id,
            OperationInProgressError,
            "another operation on this record is still in progress",
        )

    async def archive(
        self,
        kind: RecordKind,
        record_id: str,
        actor_id: Optional[str] = None,
    ) -> LifecycleResult:
        """
        Move record_id from the active collection to the archive collection.
        The archive copy gets a store-assigned id and carries archivedAt, archivedBy
        and originalId.
        """
        descriptor = get_descriptor(kind)
        action = LifecycleAction.ARCHIVE
        kind_view = self._view.for_kind(kind)
        if not kind_view.begin_processing(record_id):
            return self._in_progress(descriptor, action, record_id)
        try:
            return await self._archive(descriptor, kind_view, record_id, actor_id)
        finally:
            kind_view.end_processing(record_id)

    async def _archive(
        self,
        descriptor: KindDescriptor,
        kind_view: KindView,
        record_id: str,
        actor_id: Optional[str],
    ) -> LifecycleResult:
        action = LifecycleAction.ARCHIVE
        active = self.adapter(descriptor.kind, LifecycleState.ACTIVE)
        archive = self.adapter(descriptor.kind, LifecycleState.ARCHIVED)
        self._logger.info(
            "archive_started",
            extra={"kind": descriptor.kind.value, "record_id": record_id},
        )

        try:
            source = await active.get(record_id)
        except StoreTransportError as e:
            return self._failed(descriptor, action, record_id, TransportFailureError, STORE_UNAVAILABLE, e)
        if source is None:
            return self._failed(
                descriptor, action, record_id, RecordNotFoundError, f"{descriptor.label} not found"
            )
        validate_transition(source.state, LifecycleState.ARCHIVING)

        payload = source.business_fields()
        payload[ARCHIVED_AT] = self._clock()
        payload[ARCHIVED_BY] = actor_id or actor_id_ctx.get() or UNKNOWN_ACTOR
        payload[ORIGINAL_ID] = record_id

        try:
            archived_id = await archive.create(payload)
        except StoreTransportError as e:
            return self._failed(descriptor, action, record_id, TransportFailureError, STORE_UNAVAILABLE, e)
        written = ArchivableRecord(
            id=archived_id,
            kind=descriptor.kind,
            payload=payload,
            state=LifecycleState.ARCHIVED,
        )

        try:
            await active.delete(record_id)
        except StoreTransportError as e:
            return self._partial(descriptor, action, record_id, written, e)
        validate_transition(LifecycleState.ARCHIVING, written.state)

        kind_view.remove_active(record_id)
        self._logger.info(
            "archive_completed",
            extra={
                "kind": descriptor.kind.value,
                "record_id": record_id,
                "archived_id": archived_id,
            },
        )
        return self._result(
            LifecycleOutcome.COMPLETED,
            descriptor,
            action,
            record_id,
            f"{descriptor.label.capitalize()} archived successfully",
            record=written,
        )

    async def restore(self, kind: RecordKind, record_id: str) -> LifecycleResult:
        """
        Move an archive-collection record back to the active collection, stripping
        archivedAt, archivedBy and originalId and refreshing updatedAt. Kinds with
        identity continuity are written back under originalId.
        """
        descriptor = get_descriptor(kind)
        action = LifecycleAction.RESTORE
        kind_view = self._view.for_kind(kind)
        if not kind_view.begin_processing(record_id):
            return self._in_progress(descriptor, action, record_id)
        try:
            return await self._restore(descriptor, kind_view, record_id)
        finally:
            kind_view.end_processing(record_id)

    async def _restore(
        self,
        descriptor: KindDescriptor,
        kind_view: KindView,
        record_id: str,
    ) -> LifecycleResult:
        action = LifecycleAction.RESTORE
        active = self.adapter(descriptor.kind, LifecycleState.ACTIVE)
        archive = self.adapter(descriptor.kind, LifecycleState.ARCHIVED)
        self._logger.info(
            "restore_started",
            extra={"kind": descriptor.kind.value, "record_id": record_id},
        )

        try:
            source = await archive.get(record_id)
        except StoreTransportError as e:
            return self._failed(descriptor, action, record_id, TransportFailureError, STORE_UNAVAILABLE, e)
        if source is None:
            return self._failed(
                descriptor, action, record_id, RecordNotFoundError, f"archived {descriptor.label} not found"
            )
        validate_transition(source.state, LifecycleState.RESTORING)

        payload = {k: v for k, v in source.payload.items() if k not in LIFECYCLE_FIELDS}
        payload[UPDATED_AT] = self._clock()
        target_id = None
        if descriptor.identity_continuity:
            target_id = source.original_id or record_id

        try:
            restored_id = await active.create(payload, record_id=target_id)
        except StoreTransportError as e:
            return self._failed(descriptor, action, record_id, TransportFailureError, STORE_UNAVAILABLE, e)
        written = ArchivableRecord(
            id=restored_id,
            kind=descriptor.kind,
            payload=payload,
            state=LifecycleState.ACTIVE,
        )

        try:
            await archive.delete(record_id)
        except StoreTransportError as e:
            return self._partial(descriptor, action, record_id, written, e)
        validate_transition(LifecycleState.RESTORING, written.state)

        kind_view.remove_archived(record_id)
        self._logger.info(
            "restore_completed",
            extra={
                "kind": descriptor.kind.value,
                "record_id": record_id,
                "restored_id": restored_id,
            },
        )
        return self._result(
            LifecycleOutcome.COMPLETED,
            descriptor,
            action,
            record_id,
            f"{descriptor.label.capitalize()} restored successfully",
            record=written,
        )
