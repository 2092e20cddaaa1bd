"""Outcome of a lifecycle transition. Tagged result rather than a boolean."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from archive_lifecycle.application.exceptions import LifecycleError
from archive_lifecycle.domain.models.record import ArchivableRecord, RecordKind


class LifecycleOutcome(str, Enum):
    COMPLETED = "completed"
    PARTIALLY_COMPLETED = "partially_completed"
    FAILED = "failed"


class LifecycleAction(str, Enum):
    ARCHIVE = "archive"
    RESTORE = "restore"


@dataclass(frozen=True)
class LifecycleResult:
    """
    COMPLETED: record moved. PARTIALLY_COMPLETED: written to the destination but
    still present at the source (duplicate_risk). FAILED: no collection was mutated.
    """

    outcome: LifecycleOutcome
    kind: RecordKind
    action: LifecycleAction
    record_id: str
    message: str
    record: Optional[ArchivableRecord] = None
    error: Optional[LifecycleError] = None

    @property
    def duplicate_risk(self) -> bool:
        return self.outcome is LifecycleOutcome.PARTIALLY_COMPLETED

    @property
    def succeeded(self) -> bool:
        return self.outcome is LifecycleOutcome.COMPLETED

    @property
    def new_record_id(self) -> Optional[str]:
        return self.record.id if self.record is not None else None

    def raise_for_outcome(self) -> None:
        """Raise the typed error unless the transition completed."""
        if self.error is not None:
            raise self.error
