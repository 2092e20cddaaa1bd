"""Records API router: list active/archived, archive, restore. Thin mapping onto LifecycleEngine."""

from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from archive_lifecycle.api.dependencies import get_actor_id, get_lifecycle_engine
from archive_lifecycle.application.exceptions import (
    OperationInProgressError,
    RecordNotFoundError,
)
from archive_lifecycle.application.lifecycle_result import LifecycleOutcome, LifecycleResult
from archive_lifecycle.application.lifecycle_service import LifecycleEngine
from archive_lifecycle.domain.models.record import LifecycleState, RecordKind, RecordView
from archive_lifecycle.domain.schemas.record import (
    LifecycleResponse,
    RecordListResponse,
    RecordResponse,
)
from archive_lifecycle.domain.validators.record_validator import (
    build_filter_criteria,
    parse_record_kind,
    validate_record_id,
)

router = APIRouter()

# Partial completion is reported as multi-status so clients cannot mistake it for success.
_PARTIAL_STATUS = 207


def _to_list_response(kind: RecordKind, state: LifecycleState, views: List[RecordView]) -> RecordListResponse:
    return RecordListResponse(
        kind=kind,
        state=state,
        count=len(views),
        records=[
            RecordResponse(
                id=v.record.id,
                kind=v.record.kind,
                state=v.record.state,
                display_name=v.display_name,
                payload=v.record.payload,
            )
            for v in views
        ],
    )


def _status_code(result: LifecycleResult) -> int:
    if result.outcome is LifecycleOutcome.COMPLETED:
        return 200
    if result.outcome is LifecycleOutcome.PARTIALLY_COMPLETED:
        return _PARTIAL_STATUS
    if isinstance(result.error, RecordNotFoundError):
        return 404
    if isinstance(result.error, OperationInProgressError):
        return 409
    return 503


def _to_lifecycle_response(result: LifecycleResult) -> JSONResponse:
    body = LifecycleResponse(
        outcome=result.outcome.value,
        kind=result.kind,
        action=result.action.value,
        record_id=result.record_id,
        new_record_id=result.new_record_id,
        duplicate_risk=result.duplicate_risk,
        message=result.message,
    )
    return JSONResponse(status_code=_status_code(result), content=body.model_dump(mode="json"))


@router.get("/{kind}/active", response_model=RecordListResponse)
async def list_active(
    kind: str,
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
    on_date: Annotated[Optional[date], Query(alias="date")] = None,
    q: Optional[str] = None,
):
    """Active records of kind, newest first, optionally filtered."""
    record_kind = parse_record_kind(kind)
    criteria = build_filter_criteria(on_date, q)
    views = await engine.list_active(record_kind)
    if not criteria.is_empty:
        views = engine.apply_filter(record_kind, criteria, state=LifecycleState.ACTIVE)
    return _to_list_response(record_kind, LifecycleState.ACTIVE, views)


@router.get("/{kind}/archived", response_model=RecordListResponse)
async def list_archived(
    kind: str,
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
    on_date: Annotated[Optional[date], Query(alias="date")] = None,
    q: Optional[str] = None,
):
    """Archived records of kind, newest first, filtered by archive day and/or search text."""
    record_kind = parse_record_kind(kind)
    criteria = build_filter_criteria(on_date, q)
    views = await engine.fetch_archived(record_kind, criteria)
    return _to_list_response(record_kind, LifecycleState.ARCHIVED, views)


@router.post("/{kind}/{record_id}/archive", response_model=LifecycleResponse)
async def archive_record(
    kind: str,
    record_id: str,
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
    actor_id: Annotated[Optional[str], Depends(get_actor_id)] = None,
):
    """Move an active record to the archive."""
    record_kind = parse_record_kind(kind)
    result = await engine.archive(record_kind, validate_record_id(record_id), actor_id=actor_id)
    return _to_lifecycle_response(result)


@router.post("/{kind}/archived/{record_id}/restore", response_model=LifecycleResponse)
async def restore_record(
    kind: str,
    record_id: str,
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Move an archived record back to the active collection."""
    record_kind = parse_record_kind(kind)
    result = await engine.restore(record_kind, validate_record_id(record_id))
    return _to_lifecycle_response(result)
