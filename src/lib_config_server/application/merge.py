"""Application-layer merge policy.

Purpose
-------
Combine the globals and service layers of a category into one mapping and run
the two-scope fetch protocol shared by every provider. The module is free of
backend I/O: providers hand in a :data:`~lib_config_server.application.ports.ScopeFetcher`.

Contents
    - ``merge_scopes``: service entries override globals entries.
    - ``resolve_category``: fetch globals, fetch service, absorb ``NotFound``,
      merge, wrap in :class:`ConfigResult`.

System Role
-----------
Called by :class:`lib_config_server.adapters.providers.base.BaseProvider` for
configs, certs and files alike, so the override law holds identically for
every category and backend.
"""

from __future__ import annotations

from typing import Mapping

from ..domain.errors import NotFound
from ..domain.models import Category, ConfigResult, Coordinate, Scope
from ..observability import log_debug, log_info, make_event
from .ports import ScopeFetcher

SCOPE_ORDER: tuple[Scope, ...] = (Scope.GLOBALS, Scope.SERVICE)


def merge_scopes(globals_map: Mapping[str, object], service_map: Mapping[str, object]) -> dict[str, object]:
    """Return globals overlaid by service entries.

    Keys are merged at the top level only: a service value replaces the
    globals value for the same key wholesale.

    Examples
    --------
    >>> merge_scopes({"name": "global", "global": "g"}, {"name": "svc", "service": "s"})
    {'name': 'svc', 'global': 'g', 'service': 's'}
    """

    merged = dict(globals_map)
    merged.update(service_map)
    return merged


def resolve_category(coordinate: Coordinate, category: Category, fetch_scope: ScopeFetcher) -> ConfigResult:
    """Fetch both scopes of *category* for *coordinate* and merge them.

    Why
    ----
    A missing scope is normal (many services have no overrides), but a broken
    scope must not yield a silently partial result.

    What
    ----
    Calls *fetch_scope* for :attr:`Scope.GLOBALS` then :attr:`Scope.SERVICE`.
    ``NotFound`` contributes an empty mapping; every other exception
    propagates unchanged and aborts the operation.

    Examples
    --------
    >>> def fetch(scope):
    ...     if scope is Scope.GLOBALS:
    ...         raise NotFound("no globals")
    ...     return {"port": 8443}
    >>> resolve_category(Coordinate("retail"), Category.CONFIGS, fetch).properties
    {'port': 8443}
    """

    layers: dict[Scope, Mapping[str, object]] = {}
    for scope in SCOPE_ORDER:
        try:
            layers[scope] = fetch_scope(scope)
        except NotFound as exc:
            log_debug("scope_missing", **make_event(scope.value, None, {"category": category.value, "reason": str(exc)}))
            layers[scope] = {}
        else:
            log_debug("scope_loaded", **make_event(scope.value, None, {"category": category.value, "keys": len(layers[scope])}))

    merged = merge_scopes(layers[Scope.GLOBALS], layers[Scope.SERVICE])
    log_info(
        "category_resolved",
        **make_event("merged", None, {"category": category.value, "project": coordinate.project_name, "keys": len(merged)}),
    )
    return ConfigResult(coordinate, merged)
