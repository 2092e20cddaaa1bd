"""Domain model for archivable records. Pure business semantics; no store or transport."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from archive_lifecycle.domain.exceptions import InvalidLifecycleTransitionError

# Payload field names. These are the document store's own field names.
ARCHIVED_AT = "archivedAt"
ARCHIVED_BY = "archivedBy"
ORIGINAL_ID = "originalId"
CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"

LIFECYCLE_FIELDS: FrozenSet[str] = frozenset({ARCHIVED_AT, ARCHIVED_BY, ORIGINAL_ID})


class RecordKind(str, Enum):
    """The record kinds that share the archive/restore lifecycle."""

    RESIDENTS = "residents"
    COMPLAINTS = "complaints"
    VEHICLE_REGISTRATIONS = "vehicle_registrations"
    MAINTENANCE = "maintenance"
    BILLINGS = "billings"
    VISITORS = "visitors"
    ANNOUNCEMENTS = "announcements"


class LifecycleState(str, Enum):
    """
    Where a record lives. ACTIVE and ARCHIVED are derived from the collection that
    holds the record; ARCHIVING and RESTORING exist only while an operation is in flight.
    """

    ACTIVE = "active"
    ARCHIVING = "archiving"
    ARCHIVED = "archived"
    RESTORING = "restoring"


_STATE_TRANSITIONS: Dict[LifecycleState, FrozenSet[LifecycleState]] = {
    LifecycleState.ACTIVE: frozenset({LifecycleState.ARCHIVING}),
    LifecycleState.ARCHIVING: frozenset({LifecycleState.ARCHIVED}),
    LifecycleState.ARCHIVED: frozenset({LifecycleState.RESTORING}),
    LifecycleState.RESTORING: frozenset({LifecycleState.ACTIVE}),
}


def validate_transition(current: LifecycleState, new: LifecycleState) -> None:
    """Validate that transition from current to new is allowed. Raises if invalid."""
    allowed = _STATE_TRANSITIONS.get(current, frozenset())
    if new not in allowed:
        raise InvalidLifecycleTransitionError(
            f"Invalid lifecycle transition from {current.value} to {new.value}"
        )


@dataclass
class ArchivableRecord:
    """
    One document of a record kind. The payload is opaque to the engine apart from
    the lifecycle fields; state reflects the collection the record was read from.
    """

    id: str
    kind: RecordKind
    payload: Dict[str, Any]
    state: LifecycleState = LifecycleState.ACTIVE

    @property
    def archived_at(self) -> Any:
        return self.payload.get(ARCHIVED_AT)

    @property
    def archived_by(self) -> Optional[str]:
        return self.payload.get(ARCHIVED_BY)

    @property
    def original_id(self) -> Optional[str]:
        return self.payload.get(ORIGINAL_ID)

    def business_fields(self) -> Dict[str, Any]:
        """Payload without lifecycle-only fields."""
        return {k: v for k, v in self.payload.items() if k not in LIFECYCLE_FIELDS}


@dataclass(frozen=True)
class FilterCriteria:
    """Date bucket and free-text filter. Both optional; conjunctive when both set."""

    on_date: Optional[date] = None
    query: Optional[str] = None

    @property
    def normalized_query(self) -> str:
        return (self.query or "").strip().lower()

    @property
    def is_empty(self) -> bool:
        return self.on_date is None and not self.normalized_query


@dataclass
class RecordView:
    """A record paired with its resolved actor display name, as rendered."""

    record: ArchivableRecord
    display_name: str = field(default="")
