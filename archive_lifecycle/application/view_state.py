"""In-memory view state per record kind: last known lists, resolved names, in-flight record ids."""

from dataclasses import dataclass, field
from typing import Dict, List, Set

from archive_lifecycle.domain.models.record import ArchivableRecord, RecordKind


@dataclass
class KindView:
    """
    Last known good lists for one kind. Lifecycle operations only remove entries
    after the store confirms the move; nothing is updated optimistically.
    processing holds the ids whose archive/restore is in flight (advisory single-flight).
    """

    active: List[ArchivableRecord] = field(default_factory=list)
    archived: List[ArchivableRecord] = field(default_factory=list)
    names: Dict[str, str] = field(default_factory=dict)
    processing: Set[str] = field(default_factory=set)

    def begin_processing(self, record_id: str) -> bool:
        """Take the processing token for record_id. False if it is already held."""
        if record_id in self.processing:
            return False
        self.processing.add(record_id)
        return True

    def end_processing(self, record_id: str) -> None:
        self.processing.discard(record_id)

    def is_processing(self, record_id: str) -> bool:
        return record_id in self.processing

    def remove_active(self, record_id: str) -> None:
        self.active = [r for r in self.active if r.id != record_id]

    def remove_archived(self, record_id: str) -> None:
        self.archived = [r for r in self.archived if r.id != record_id]


class ViewState:
    """Holds one KindView per record kind for the lifetime of a session."""

    def __init__(self) -> None:
        self._views: Dict[RecordKind, KindView] = {}

    def for_kind(self, kind: RecordKind) -> KindView:
        if kind not in self._views:
            self._views[kind] = KindView()
        return self._views[kind]
