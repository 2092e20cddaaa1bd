"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from archive_lifecycle.domain.exceptions import (
    DomainError,
    DomainValidationError,
    InvalidLifecycleTransitionError,
    UnknownRecordKindError,
)
from archive_lifecycle.domain.models import (
    ArchivableRecord,
    FilterCriteria,
    KindDescriptor,
    LifecycleState,
    RecordKind,
    RecordView,
    get_descriptor,
)

__all__ = [
    "ArchivableRecord",
    "DomainError",
    "DomainValidationError",
    "FilterCriteria",
    "InvalidLifecycleTransitionError",
    "KindDescriptor",
    "LifecycleState",
    "RecordKind",
    "RecordView",
    "UnknownRecordKindError",
    "get_descriptor",
]
