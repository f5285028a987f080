"""Public package surface for ``lib_config_server``.

Resolve configs, certificates and files for a service coordinate from one of
five backends (filesystem, Git, Vault, MongoDB, plain HTTP), merging the
project-wide globals layer with the service layer. Request handlers need only
the names exported here: build a provider once with :func:`create_provider`,
then call :func:`fetch` or :func:`search` per request and map failures with
:func:`status_for` and :func:`error_payload`.
"""

from __future__ import annotations

from .application.merge import merge_scopes
from .application.ports import Provider
from .core import create_provider, error_payload, fetch, search, status_for
from .domain.errors import (
    BackendUnavailable,
    ConfigServerError,
    NotFound,
    ParseError,
    SettingsError,
    Unauthorized,
    UpstreamError,
)
from .domain.models import Category, ConfigResult, Coordinate, Scope
from .observability import bind_trace_id, get_logger
from .settings import ProviderKind, Settings, load_settings

__all__ = [
    "BackendUnavailable",
    "Category",
    "ConfigResult",
    "ConfigServerError",
    "Coordinate",
    "NotFound",
    "ParseError",
    "Provider",
    "ProviderKind",
    "Scope",
    "Settings",
    "SettingsError",
    "Unauthorized",
    "UpstreamError",
    "bind_trace_id",
    "create_provider",
    "error_payload",
    "fetch",
    "get_logger",
    "load_settings",
    "merge_scopes",
    "search",
    "status_for",
]
