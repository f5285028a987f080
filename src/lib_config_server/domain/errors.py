"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by every backend provider, the composition
root, and the boundary helpers. Each backend signals failure differently (HTTP
status codes, missing documents, ``OSError``); adapters translate those signals
into the small set of types below so callers never depend on a backend's
native failure mode.

Contents
--------
* :class:`ConfigServerError` – umbrella base class carrying a stable ``kind``.
* :class:`Unauthorized` – credential missing, malformed, or rejected.
* :class:`NotFound` – a scope address resolved to nothing (absorbed by the
  merge step, never surfaced for a single scope).
* :class:`BackendUnavailable` – the backend could not be reached.
* :class:`ParseError` – a payload could not be decoded into the expected shape.
* :class:`UpstreamError` – the backend answered with a non-2xx, non-404 status.
* :class:`SettingsError` – the service settings are incomplete or invalid.
"""

from __future__ import annotations

from typing import ClassVar


class ConfigServerError(Exception):
    """Base type for all exceptions emitted by ``lib_config_server``.

    Subclasses set :attr:`kind` so boundary code can report the failure class
    without ``isinstance`` ladders.
    """

    kind: ClassVar[str] = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(ConfigServerError):
    """Raised when the caller's credential is absent, malformed, or rejected."""

    kind = "unauthorized"


class NotFound(ConfigServerError):
    """Represents a scope address with no content behind it.

    The merge step treats this as an empty contribution, so it only escapes to
    callers when a provider is used directly for a single scope.
    """

    kind = "not_found"


class BackendUnavailable(ConfigServerError):
    """Transport-level failure (connection refused, timeout, unreadable disk)."""

    kind = "backend_unavailable"


class ParseError(ConfigServerError):
    """A resolved payload could not be decoded (invalid YAML/JSON, wrong shape)."""

    kind = "parse_error"


class UpstreamError(ConfigServerError):
    """The backend answered with an unexpected status.

    Attributes
    ----------
    status_code:
        Status reported by the backend, ``None`` when the backend has no status
        codes (document store driver errors).
    message:
        Backend diagnostic text, kept verbatim.
    """

    kind = "upstream_error"

    def __init__(self, message: str = "", *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


class SettingsError(ConfigServerError):
    """Service settings are missing a required value or name an unknown provider."""

    kind = "settings_error"
