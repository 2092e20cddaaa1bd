"""Validators for request inputs. Pure functions, no store access."""

from datetime import date
from typing import Optional

from archive_lifecycle.domain.exceptions import DomainValidationError, UnknownRecordKindError
from archive_lifecycle.domain.models.record import FilterCriteria, RecordKind

MAX_QUERY_LENGTH = 200


def parse_record_kind(raw: str) -> RecordKind:
    """Map a path segment to RecordKind. Accepts hyphens for underscores."""
    try:
        return RecordKind(raw.strip().lower().replace("-", "_"))
    except ValueError:
        raise UnknownRecordKindError(f"Unknown record kind: {raw}") from None


def validate_record_id(record_id: str) -> str:
    """Record ids are opaque but must be non-empty and a single path segment."""
    if not record_id or not record_id.strip():
        raise DomainValidationError("record id must not be empty")
    if "/" in record_id:
        raise DomainValidationError("record id must not contain '/'")
    return record_id.strip()


def build_filter_criteria(on_date: Optional[date], query: Optional[str]) -> FilterCriteria:
    """Build FilterCriteria from request parameters. Blank queries are dropped."""
    if query is not None and len(query) > MAX_QUERY_LENGTH:
        raise DomainValidationError(
            f"search query must be at most {MAX_QUERY_LENGTH} characters"
        )
    cleaned = query.strip() if query else None
    return FilterCriteria(on_date=on_date, query=cleaned or None)
