"""JSON encoding for stored documents. Datetimes survive the round trip as tagged objects."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

DATETIME_TAG = "__datetime__"


def encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return {DATETIME_TAG: value.isoformat()}
    if isinstance(value, Mapping):
        return {str(k): encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    return value


def decode_value(value: Any) -> Any:
    if isinstance(value, dict):
        if len(value) == 1 and DATETIME_TAG in value:
            return datetime.fromisoformat(value[DATETIME_TAG])
        return {k: decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    return value


def dumps(data: Mapping[str, Any]) -> str:
    return json.dumps(encode_value(data))


def loads(raw: str) -> Dict[str, Any]:
    return decode_value(json.loads(raw))


def matches_filters(data: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
    """Equality predicate shared by stores that filter client-side."""
    if not filters:
        return True
    return all(data.get(k) == v for k, v in filters.items())
