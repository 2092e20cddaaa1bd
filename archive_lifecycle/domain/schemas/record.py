"""Pydantic schemas for the records API. Serialization only, no store access."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from archive_lifecycle.domain.models.record import LifecycleState, RecordKind


class RecordResponse(BaseModel):
    """One record as rendered: payload plus resolved actor name."""

    id: str
    kind: RecordKind
    state: LifecycleState
    display_name: str = ""
    payload: Dict[str, Any] = Field(default_factory=dict)


class RecordListResponse(BaseModel):
    kind: RecordKind
    state: LifecycleState
    count: int
    records: List[RecordResponse]


class LifecycleResponse(BaseModel):
    """Outcome of an archive or restore. duplicate_risk is set on partial completion."""

    outcome: str
    kind: RecordKind
    action: str
    record_id: str
    new_record_id: Optional[str] = None
    duplicate_risk: bool = False
    message: str
