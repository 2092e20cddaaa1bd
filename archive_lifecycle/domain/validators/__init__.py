"""Domain validators. Pure functions only."""

from archive_lifecycle.domain.validators.record_validator import (
    build_filter_criteria,
    parse_record_kind,
    validate_record_id,
)

__all__ = [
    "build_filter_criteria",
    "parse_record_kind",
    "validate_record_id",
]
