"""Structured logging helpers shared by providers and the composition root.

Purpose
    Keep every diagnostic emitted while resolving a coordinate predictable and
    correlated, without forcing host applications to adopt a logging backend.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: builds the payload describing one scope fetch.

System Integration
    Providers log each backend address they touch; the merge policy logs the
    per-scope outcome and the merged key count. Credentials and tokens are
    never passed to these helpers.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_config_server_trace_id", default=None)
"""Current trace identifier, typically the inbound request id."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_config_server")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('req-42')
    >>> TRACE_ID.get()
    'req-42'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(
    scope: str,
    address: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured payload for a scope fetch.

    Inputs
        scope: ``"globals"``, ``"service"``, or ``"merged"``.
        address: Backend-native address (path, endpoint, document key).
        payload: Optional extra diagnostic fields.

    Examples
    --------
    >>> make_event('globals', '/v1/configs/data/retail/globals/v1/dev', {'keys': 2})
    {'scope': 'globals', 'address': '/v1/configs/data/retail/globals/v1/dev', 'keys': 2}
    """

    event: dict[str, Any] = {"scope": scope, "address": address}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_trace(fields)})


def _with_trace(fields: Mapping[str, Any]) -> dict[str, Any]:
    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    return context
