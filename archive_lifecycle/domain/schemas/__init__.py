"""API schemas (Pydantic). No DB or store dependencies."""

from archive_lifecycle.domain.schemas.record import (
    LifecycleResponse,
    RecordListResponse,
    RecordResponse,
)

__all__ = [
    "LifecycleResponse",
    "RecordListResponse",
    "RecordResponse",
]
