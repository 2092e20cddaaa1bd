"""Per-kind descriptors: collection names, name resolution, search and date fields."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from archive_lifecycle.domain.exceptions import UnknownRecordKindError
from archive_lifecycle.domain.models.record import (
    ARCHIVED_AT,
    CREATED_AT,
    UPDATED_AT,
    RecordKind,
)


@dataclass(frozen=True)
class KindDescriptor:
    """
    Everything the generic engine needs to know about one record kind.

    actor_field names the foreign actor reference (None when the kind has none);
    self_named kinds are their own actor and take the display name from the record.
    contact_fields are literal contact strings captured at submission, used when
    the actor lookup fails. search_fields must cover every field the summary shows.
    """

    kind: RecordKind
    label: str
    active_collection: str
    archive_collection: str
    search_fields: Tuple[str, ...]
    actor_field: Optional[str] = None
    contact_fields: Tuple[str, ...] = ()
    self_named: bool = False
    date_fields: Tuple[str, ...] = (ARCHIVED_AT, CREATED_AT)
    active_sort_field: str = CREATED_AT
    archive_sort_field: str = ARCHIVED_AT
    archive_secondary_sort_field: Optional[str] = CREATED_AT
    identity_continuity: bool = False
    exclude_when: Mapping[str, Any] = field(default_factory=dict)

    @property
    def resolves_actor(self) -> bool:
        return self.self_named or self.actor_field is not None

    def is_excluded(self, payload: Mapping[str, Any]) -> bool:
        """True when the payload matches any exclusion rule for this kind."""
        return any(payload.get(k) == v for k, v in self.exclude_when.items())

    def local_sort_fields(self, archived: bool) -> Tuple[str, ...]:
        """Fields an in-memory sort walks; the same ones the ordered query for that list uses."""
        if not archived:
            return (self.active_sort_field,)
        if self.archive_secondary_sort_field is None:
            return (self.archive_sort_field,)
        return (self.archive_sort_field, self.archive_secondary_sort_field)


_NAME_FIELDS = ("fullName", "firstName", "middleName", "lastName", "email", "phone")

KIND_DESCRIPTORS: Dict[RecordKind, KindDescriptor] = {
    RecordKind.RESIDENTS: KindDescriptor(
        kind=RecordKind.RESIDENTS,
        label="resident",
        active_collection="users",
        archive_collection="archivedUsers",
        search_fields=_NAME_FIELDS,
        self_named=True,
        identity_continuity=True,
        exclude_when={"role": "superadmin"},
    ),
    RecordKind.COMPLAINTS: KindDescriptor(
        kind=RecordKind.COMPLAINTS,
        label="complaint",
        active_collection="complaints",
        archive_collection="archivedComplaints",
        search_fields=("subject", "description"),
        actor_field="userId",
        contact_fields=("userEmail",),
    ),
    RecordKind.VEHICLE_REGISTRATIONS: KindDescriptor(
        kind=RecordKind.VEHICLE_REGISTRATIONS,
        label="vehicle registration",
        active_collection="vehicleRegistrations",
        archive_collection="archivedVehicleRegistrations",
        search_fields=("plateNumber", "make", "model", "color", "vehicleType"),
        actor_field="userId",
        contact_fields=("userEmail",),
    ),
    RecordKind.MAINTENANCE: KindDescriptor(
        kind=RecordKind.MAINTENANCE,
        label="maintenance request",
        active_collection="maintenance",
        archive_collection="archivedMaintenance",
        search_fields=("maintenanceType", "description"),
        actor_field="userId",
        contact_fields=("userEmail",),
    ),
    RecordKind.BILLINGS: KindDescriptor(
        kind=RecordKind.BILLINGS,
        label="billing",
        active_collection="billings",
        archive_collection="archivedBillings",
        search_fields=("residentEmail", "billingCycle"),
        actor_field="residentId",
        contact_fields=("residentEmail",),
        date_fields=(ARCHIVED_AT, UPDATED_AT),
        archive_secondary_sort_field=UPDATED_AT,
    ),
    RecordKind.VISITORS: KindDescriptor(
        kind=RecordKind.VISITORS,
        label="visitor pre-registration",
        active_collection="visitors",
        archive_collection="archivedVisitors",
        search_fields=("visitorName", "visitorPurpose", "visitorPhone"),
        actor_field="residentId",
        contact_fields=("residentEmail",),
        identity_continuity=True,
    ),
    RecordKind.ANNOUNCEMENTS: KindDescriptor(
        kind=RecordKind.ANNOUNCEMENTS,
        label="announcement",
        active_collection="announcements",
        archive_collection="archivedAnnouncements",
        search_fields=("title", "content"),
    ),
}


def get_descriptor(kind: RecordKind) -> KindDescriptor:
    """Return the descriptor for kind. Raises UnknownRecordKindError if none is registered."""
    try:
        return KIND_DESCRIPTORS[kind]
    except KeyError:
        raise UnknownRecordKindError(f"Unknown record kind: {kind}") from None
