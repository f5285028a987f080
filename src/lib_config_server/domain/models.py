"""Domain value objects for configuration lookups.

Purpose
-------
Describe *what* is being resolved without any knowledge of *where* it is
stored. The module contains no I/O so every backend provider, the merge policy,
and the boundary helpers can share the same vocabulary.

Contents
--------
* :class:`Category` – configs, certs, or files.
* :class:`Scope` – the globals (project-wide) or service layer.
* :class:`Coordinate` – the project/service/version/environment tuple.
* :class:`ConfigResult` – a coordinate paired with its merged properties.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field, fields
from datetime import date, time
from enum import Enum
from typing import Any, Mapping, Sequence

GLOBALS_SEGMENT = "globals"

# Query parameter names used by the HTTP boundary; they match the field names.
QUERY_PARAMETERS: tuple[str, ...] = (
    "project_name",
    "project_version",
    "service_name",
    "service_version",
    "environment",
)

_CAMEL_CASE = {
    "project_name": "projectName",
    "project_version": "projectVersion",
    "service_name": "serviceName",
    "service_version": "serviceVersion",
    "environment": "environment",
}


class Category(str, Enum):
    """Kind of payload requested for a coordinate.

    ``CONFIGS`` resolves structured key/value settings; ``CERTS`` and ``FILES``
    resolve opaque files returned as base64 strings keyed by file name.
    """

    CONFIGS = "configs"
    CERTS = "certs"
    FILES = "files"

    @property
    def is_structured(self) -> bool:
        return self is Category.CONFIGS


class Scope(Enum):
    """Layer of a category; service entries override globals entries."""

    GLOBALS = "globals"
    SERVICE = "service"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Address of one configuration slice.

    Why
    ----
    Fetch operations need all five fields while search results only know the
    project (and maybe the service). A single type with optional tail fields
    covers both; :meth:`require_complete` guards the fetch paths.

    Examples
    --------
    >>> coordinate = Coordinate("retail", "v1", "api-customers", "v2", "dev")
    >>> coordinate.scope_segments(Scope.GLOBALS)
    ('globals', 'v1')
    >>> coordinate.scope_segments(Scope.SERVICE)
    ('api-customers', 'v2')
    """

    project_name: str
    project_version: str | None = None
    service_name: str | None = None
    service_version: str | None = None
    environment: str | None = None

    @classmethod
    def from_query(cls, params: Mapping[str, str | Sequence[str] | None]) -> "Coordinate":
        """Build a coordinate from HTTP query parameters.

        List values (as produced by most query parsers) contribute their first
        element. Missing ``project_name`` raises :class:`ValueError`.

        Examples
        --------
        >>> Coordinate.from_query({"project_name": ["retail"], "environment": "dev"})
        Coordinate(project_name='retail', project_version=None, service_name=None, service_version=None, environment='dev')
        """

        values: dict[str, str | None] = {}
        for parameter in QUERY_PARAMETERS:
            values[parameter] = _first(params.get(parameter))
        project_name = values.pop("project_name")
        if not project_name:
            raise ValueError("Query parameter project_name is required")
        return cls(project_name, **values)

    def missing_fields(self) -> list[str]:
        """Return the names of fields that are ``None`` or blank."""

        return [item.name for item in fields(self) if not getattr(self, item.name)]

    def require_complete(self) -> "Coordinate":
        """Return ``self`` when every field is populated, else raise ``ValueError``."""

        missing = self.missing_fields()
        if missing:
            raise ValueError(f"Coordinate is missing required fields: {', '.join(missing)}")
        return self

    def scope_segments(self, scope: Scope) -> tuple[str, str]:
        """Return ``(name, version)`` used to address *scope*.

        Globals are addressed with the *project* version, the service layer
        with the *service* version.
        """

        if scope is Scope.GLOBALS:
            return GLOBALS_SEGMENT, str(self.project_version)
        return str(self.service_name), str(self.service_version)

    def to_dict(self) -> dict[str, str | None]:
        """Serialise using the camelCase names published by the config server API."""

        return {_CAMEL_CASE[item.name]: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True, slots=True)
class ConfigResult:
    """Merged properties for a coordinate.

    ``properties`` holds decoded structures for configs and base64 strings for
    certs and files. It is never ``None``; an empty mapping means neither scope
    produced content.

    Examples
    --------
    >>> result = ConfigResult(Coordinate("retail"), {"name": "svc"})
    >>> result.to_dict()["configProperties"]
    {'name': 'svc'}
    """

    coordinate: Coordinate
    properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"configProperties": dict(self.properties), "service": self.coordinate.to_dict()}

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise :meth:`to_dict`; YAML dates become ISO text and binary values base64.

        Examples
        --------
        >>> payload = ConfigResult(Coordinate("retail"), {"release": date(2024, 1, 1)}).to_json()
        >>> json.loads(payload)["configProperties"]
        {'release': '2024-01-01'}
        """

        return json.dumps(
            self.to_dict(),
            indent=indent,
            separators=(",", ":") if indent is None else None,
            default=_json_default,
        )


def _json_default(value: Any) -> str:
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return str(value)


def _first(value: str | Sequence[str] | None) -> str | None:
    """Return the first element of list-like query values."""

    if value is None or isinstance(value, str):
        return value
    return value[0] if value else None
