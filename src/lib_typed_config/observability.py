"""Structured logging helpers for the settings pipeline.

Purpose
    Keep every diagnostic emitted while loading and unmarshalling settings
    predictable and contextual, without forcing applications onto a logging
    backend.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: convenience builder for source lifecycle payloads.
    - ``make_target_event``: payload naming the dataclass being unmarshalled.

System Integration
    Used by the adapters, the merge engine, and the façade so that a single
    ``unmarshal`` call can be followed end to end via its trace identifier.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_typed_config_trace_id", default=None)
"""Current trace identifier attached to every structured log entry."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_typed_config")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the trace context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the trace context."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the trace context."""

    _emit(logging.ERROR, message, fields)


def make_event(
    layer: str,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured payload describing a settings source layer.

    Inputs
        layer: ``"file"`` or ``"env"``.
        path: Settings file path associated with the event, if any.
        payload: Optional mapping with extra diagnostic detail.

    Examples
    --------
    >>> make_event('env', None, {'keys': 3})
    {'layer': 'env', 'path': None, 'keys': 3}
    """

    event: dict[str, Any] = {"layer": layer, "path": path}
    if payload:
        event |= dict(payload)
    return event


def make_target_event(target: Any, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build a structured payload for an unmarshal of *target* (type or instance).

    Examples
    --------
    >>> class Server:
    ...     pass
    >>> make_target_event(Server(), {"keys": 2})
    {'target': 'Server', 'instance': True, 'keys': 2}
    """

    cls = target if isinstance(target, type) else type(target)
    event: dict[str, Any] = {"target": cls.__qualname__, "instance": not isinstance(target, type)}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    _LOGGER.log(level, message, extra={"context": context})
