"""Domain models. Pure business entities."""

from archive_lifecycle.domain.models.kinds import (
    KIND_DESCRIPTORS,
    KindDescriptor,
    get_descriptor,
)
from archive_lifecycle.domain.models.record import (
    ArchivableRecord,
    FilterCriteria,
    LifecycleState,
    RecordKind,
    RecordView,
)

__all__ = [
    "ArchivableRecord",
    "FilterCriteria",
    "KIND_DESCRIPTORS",
    "KindDescriptor",
    "LifecycleState",
    "RecordKind",
    "RecordView",
    "get_descriptor",
]
