"""Tests for the JSON log formatter."""

import json
import logging

from archive_lifecycle.config.logging import JsonFormatter
from archive_lifecycle.core.context import actor_id_ctx, correlation_id_ctx


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.makeLogRecord({"name": "archive_lifecycle.test", "levelname": "INFO", "msg": msg})
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_includes_context_and_extras():
    corr_token = correlation_id_ctx.set("corr-1")
    actor_token = actor_id_ctx.set("admin-1")
    try:
        line = JsonFormatter().format(_record("archive_completed", kind="complaints", record_id="R1"))
    finally:
        correlation_id_ctx.reset(corr_token)
        actor_id_ctx.reset(actor_token)

    payload = json.loads(line)
    assert payload["message"] == "archive_completed"
    assert payload["correlation_id"] == "corr-1"
    assert payload["actor_id"] == "admin-1"
    assert payload["kind"] == "complaints"
    assert payload["record_id"] == "R1"


def test_formatter_defaults_context_to_null():
    payload = json.loads(JsonFormatter().format(_record("hello")))

    assert payload["correlation_id"] is None
    assert payload["level"] == "INFO"
