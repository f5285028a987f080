"""Behaviour shared by every backend provider.

Providers only know how to resolve *one* scope of a category; the
two-scope protocol and the override merge are delegated to
:func:`lib_config_server.application.merge.resolve_category`.
"""

from __future__ import annotations

from typing import ClassVar, Mapping

from ...application.merge import resolve_category
from ...domain.models import Category, ConfigResult, Coordinate, Scope


class BaseProvider:
    """Template for the provider variants.

    Subclasses implement :meth:`_fetch_configs_scope` and
    :meth:`_fetch_blobs_scope`, raising ``NotFound`` when a scope address
    holds nothing. ``login`` and ``search_services`` default to the stateless
    behaviour (no token, no listing capability). Providers work with
    :func:`contextlib.closing`, so callers release transports via :meth:`close`.
    """

    name: ClassVar[str] = "base"

    def login(self, authorization: str | None) -> str | None:
        return None

    def fetch_configs(self, token: str | None, coordinate: Coordinate) -> ConfigResult:
        return resolve_category(
            coordinate,
            Category.CONFIGS,
            lambda scope: self._fetch_configs_scope(token, coordinate, scope),
        )

    def fetch_certificates(self, token: str | None, coordinate: Coordinate) -> ConfigResult:
        return self._fetch_blobs(token, coordinate, Category.CERTS)

    def fetch_files(self, token: str | None, coordinate: Coordinate) -> ConfigResult:
        return self._fetch_blobs(token, coordinate, Category.FILES)

    def search_services(self, token: str | None, project_name: str | None) -> list[Coordinate]:
        return []

    def close(self) -> None:
        """Release backend connections. Stateless providers hold none."""

    def _fetch_blobs(self, token: str | None, coordinate: Coordinate, category: Category) -> ConfigResult:
        return resolve_category(
            coordinate,
            category,
            lambda scope: self._fetch_blobs_scope(token, coordinate, category, scope),
        )

    def _fetch_configs_scope(self, token: str | None, coordinate: Coordinate, scope: Scope) -> Mapping[str, object]:
        raise NotImplementedError

    def _fetch_blobs_scope(
        self, token: str | None, coordinate: Coordinate, category: Category, scope: Scope
    ) -> Mapping[str, object]:
        raise NotImplementedError
