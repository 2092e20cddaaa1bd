"""Filter/Search Projector. Pure functions over an in-memory batch; no store access."""

from datetime import date, datetime, tzinfo
from typing import Any, List, Mapping, Optional, Sequence

from archive_lifecycle.domain.models.kinds import KindDescriptor
from archive_lifecycle.domain.models.record import ArchivableRecord, FilterCriteria, RecordView


def to_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes, dates and ISO-8601 strings; anything else is None."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def local_day(value: Any, tz: tzinfo) -> Optional[date]:
    """Calendar day of value in tz. Naive datetimes are taken as already local."""
    moment = to_datetime(value)
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.date()


def first_moment(record: ArchivableRecord, fields: Sequence[str]) -> Optional[datetime]:
    for key in fields:
        moment = to_datetime(record.payload.get(key))
        if moment is not None:
            return moment
    return None


def record_moment(record: ArchivableRecord, descriptor: KindDescriptor) -> Optional[datetime]:
    """First parseable timestamp along the kind's date chain (archivedAt, then its fallback)."""
    return first_moment(record, descriptor.date_fields)


def record_day(record: ArchivableRecord, descriptor: KindDescriptor, tz: tzinfo) -> Optional[date]:
    moment = record_moment(record, descriptor)
    return local_day(moment, tz) if moment is not None else None


def _sort_key(record: ArchivableRecord, fields: Sequence[str], tz: tzinfo) -> float:
    moment = first_moment(record, fields)
    if moment is None:
        return float("-inf")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz)
    return moment.timestamp()


def sort_newest_first(
    records: Sequence[ArchivableRecord],
    fields: Sequence[str],
    tz: tzinfo,
) -> List[ArchivableRecord]:
    """
    In-memory ordering after a degraded query, newest first along fields. Naive
    timestamps are wall time in tz. Records without any date sort last.
    """
    return sorted(records, key=lambda r: _sort_key(r, fields, tz), reverse=True)


def searchable_text(record: ArchivableRecord, descriptor: KindDescriptor, name: str) -> List[str]:
    values = [name]
    for key in descriptor.search_fields:
        value = record.payload.get(key)
        if value is not None:
            values.append(str(value))
    return [v.lower() for v in values if v]


def matches_text(record: ArchivableRecord, descriptor: KindDescriptor, name: str, query: str) -> bool:
    return any(query in value for value in searchable_text(record, descriptor, name))


def apply_filter(
    records: Sequence[ArchivableRecord],
    names: Mapping[str, str],
    criteria: FilterCriteria,
    descriptor: KindDescriptor,
    tz: tzinfo,
) -> List[RecordView]:
    """
    Date filter compares calendar days in tz, never exact instants. Text filter is a
    case-insensitive substring match over the kind's search fields plus the resolved
    actor name. Input order is preserved.
    """
    query = criteria.normalized_query
    views: List[RecordView] = []
    for record in records:
        name = names.get(record.id, "")
        if criteria.on_date is not None and record_day(record, descriptor, tz) != criteria.on_date:
            continue
        if query and not matches_text(record, descriptor, name, query):
            continue
        views.append(RecordView(record=record, display_name=name))
    return views
