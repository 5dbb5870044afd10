"""Unit tests for structured logging utilities in ``observability``.

Validates the null handler, trace binding, and event construction behaviour the
module reference promises to downstream consumers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from lib_typed_config import Config, bind_trace_id, get_logger, setting, with_environ, with_file_path
from lib_typed_config.observability import TRACE_ID, log_info, make_event, make_target_event


@dataclass
class Probe:
    label: str = setting("label")


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert logger.name == "lib_typed_config"
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_typed_config")
    bind_trace_id("trace-123")
    try:
        log_info("settings_unmarshalled", layer="env", path=None)
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "layer": "env", "path": None}


def test_unmarshal_logs_with_trace_id(caplog: pytest.LogCaptureFixture, tmp_path) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_typed_config")
    config = Config(with_file_path(str(tmp_path)), with_environ({"LABEL": "x"}))
    try:
        config.unmarshal(Probe, trace_id="req-7")
    finally:
        bind_trace_id(None)
    messages = {record.getMessage(): getattr(record, "context") for record in caplog.records}
    assert messages["unmarshal_complete"]["target"] == "Probe"
    assert messages["settings_unmarshalled"]["instance"] is False
    assert messages["settings_unmarshalled"]["trace_id"] == "req-7"


def test_bind_trace_id_clears_context() -> None:
    """Clearing the trace ID should reset the context variable to None."""

    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    """make_event should merge optional metadata without mutating base keys."""

    event = make_event("env", None, {"keys": 3})
    assert event == {"layer": "env", "path": None, "keys": 3}


def test_make_target_event_names_the_dataclass() -> None:
    assert make_target_event(Probe, {"keys": 1}) == {"target": "Probe", "instance": False, "keys": 1}
    assert make_target_event(Probe(label="x")) == {"target": "Probe", "instance": True}
