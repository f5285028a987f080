"""Application-layer ports describing the provider contract.

Purpose
-------
Define the structural contract every backend must satisfy so the composition
root and the boundary helpers can resolve coordinates without knowing which
backend is active.

Contents
--------
* :class:`Provider` – login, the three category fetches, and service search.
* :data:`ScopeFetcher` – callable that resolves a single scope; used by the
  merge policy.

System Role
-----------
Concrete providers live in :mod:`lib_config_server.adapters.providers`. Tests
assert ``isinstance(provider, Provider)`` to keep the variants interchangeable.
"""

from __future__ import annotations

from typing import Callable, Mapping, Protocol, runtime_checkable

from ..domain.models import ConfigResult, Coordinate, Scope

ScopeFetcher = Callable[[Scope], Mapping[str, object]]


@runtime_checkable
class Provider(Protocol):
    """Capability contract shared by the five backend variants.

    Methods
    -------
    :meth:`login`
        Validate or exchange the caller's ``Authorization`` value for a token.
    :meth:`fetch_configs` / :meth:`fetch_certificates` / :meth:`fetch_files`
        Resolve and merge both scopes for one category.
    :meth:`search_services`
        Enumerate services; backends without a listing primitive return ``[]``.
    :meth:`close`
        Release pooled connections once the provider is no longer used.
    """

    def login(self, authorization: str | None) -> str | None:
        """Return the token to pass to the fetch operations or raise ``Unauthorized``."""

    def fetch_configs(self, token: str | None, coordinate: Coordinate) -> ConfigResult:
        """Return merged structured settings for *coordinate*."""

    def fetch_certificates(self, token: str | None, coordinate: Coordinate) -> ConfigResult:
        """Return merged base64 certificate files for *coordinate*."""

    def fetch_files(self, token: str | None, coordinate: Coordinate) -> ConfigResult:
        """Return merged base64 files for *coordinate*."""

    def search_services(self, token: str | None, project_name: str | None) -> list[Coordinate]:
        """Return coordinate fragments (project and service names)."""

    def close(self) -> None:
        """Release connections held by the provider."""
