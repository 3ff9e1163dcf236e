"""Tests for structured log output."""

from __future__ import annotations

import logging

import orjson

from clone_check.core.logging import JsonFormatter, task_context


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("clone_check.test", logging.INFO, __file__, 1, "Indexed %s", ("submission 3",), None)
    record.__dict__.update(extra)
    return record


def test_context_fields_are_grouped() -> None:
    record = make_record(**task_context(task="ProcessSubmission", attempt=2))

    payload = orjson.loads(JsonFormatter().format(record))

    assert payload["message"] == "Indexed submission 3"
    assert payload["level"] == "INFO"
    assert payload["context"] == {"task": "ProcessSubmission", "attempt": 2}
    assert "ctx_task" not in payload


def test_records_without_context_have_no_context_key() -> None:
    payload = orjson.loads(JsonFormatter().format(make_record()))
    assert "context" not in payload
