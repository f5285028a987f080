"""Composition root for ``lib_config_server``.

Purpose
-------
Construct the single active backend provider from :class:`Settings` and expose
the operations the HTTP layer calls per request: authenticate, then resolve a
category or search services. Also hosts the boundary helpers that turn domain
errors into response status codes and bodies.

Contents
--------
* :func:`create_provider` – build the provider selected by ``settings.provider``.
* :func:`open_mongo_client` – connect to the MongoDB server named in settings.
* :func:`fetch` – ``login`` followed by the category fetch.
* :func:`search` – ``login`` followed by ``search_services``.
* :func:`status_for` / :func:`error_payload` – error normalisation at the
  boundary.

System Role
-----------
This is the only module that knows every adapter. Request handlers and the CLI
depend on it; providers never depend on it.
"""

from __future__ import annotations

from typing import Any, Callable

import httpx
from pymongo import MongoClient

from .adapters.providers.filesystem import FileSystemProvider
from .adapters.providers.git import GitProvider
from .adapters.providers.http import HttpTransport, new_client
from .adapters.providers.mongodb import DocumentCollection, MongoDBProvider
from .adapters.providers.url import UrlProvider
from .adapters.providers.vault import VaultProvider
from .application.ports import Provider
from .domain.errors import ConfigServerError, Unauthorized, UpstreamError
from .domain.models import Category, ConfigResult, Coordinate
from .observability import bind_trace_id, log_error, log_info
from .settings import ProviderKind, Settings, require

HTTP_UNAUTHORIZED = 401
HTTP_INTERNAL_ERROR = 500


def create_provider(
    settings: Settings,
    *,
    client: httpx.Client | None = None,
    collection: DocumentCollection | None = None,
) -> Provider:
    """Return the provider selected by ``settings.provider``.

    Why
    ----
    The backend is chosen once at start-up; request handling must not branch
    on backend kind afterwards.

    What
    ----
    Validates the settings section of the selected backend and wires its
    transport. Network providers receive *client* when given (tests pass a
    mocked one), otherwise a pooled ``httpx.Client`` bounded by
    ``settings.timeout``. The MongoDB provider receives *collection* or opens
    one on a client from :func:`open_mongo_client`, which it owns and closes.
    Callers release whatever the provider holds via ``provider.close()``.

    Raises
    ------
    SettingsError
        When a value required by the selected backend is missing.

    Examples
    --------
    >>> settings = Settings.from_mapping({"provider": "filesystem", "filesystem": {"service_configs_dir": "/srv"}})
    >>> create_provider(settings).name
    'filesystem'
    """

    kind = settings.provider
    if kind is ProviderKind.FILESYSTEM:
        provider: Provider = FileSystemProvider(
            require(settings.filesystem.service_configs_dir, "filesystem.service_configs_dir")
        )
    elif kind is ProviderKind.GIT:
        git = settings.git
        base_url = require(git.api_host, "git.api_host")
        transport = HttpTransport(client or new_client(base_url, timeout=settings.timeout, proxy=git.proxy), backend="git")
        provider = GitProvider(
            transport,
            repo_owner=require(git.repo_owner, "git.repo_owner"),
            context_root=git.context_root,
            repo_name_template=git.repo_name,
        )
    elif kind is ProviderKind.VAULT:
        base_url = require(settings.vault.server_uri, "vault.server_uri")
        provider = VaultProvider(HttpTransport(client or new_client(base_url, timeout=settings.timeout), backend="vault"))
    elif kind is ProviderKind.MONGODB:
        if collection is not None:
            provider = MongoDBProvider(collection)
        else:
            mongodb = settings.mongodb
            uri = require(mongodb.uri, "mongodb.uri")
            database = require(mongodb.database, "mongodb.database")
            collection_name = require(mongodb.collection, "mongodb.collection")
            mongo_client = open_mongo_client(uri, settings.timeout)
            provider = MongoDBProvider(mongo_client[database][collection_name], client=mongo_client)
    else:
        base_url = require(settings.url.host, "url.host")
        provider = UrlProvider(
            HttpTransport(client or new_client(base_url, timeout=settings.timeout), backend="url"),
            service_configs_dir=settings.url.service_configs_dir or "/",
        )
    log_info("provider_created", backend=kind.value)
    return provider


def open_mongo_client(uri: str, timeout: float) -> MongoClient[Any]:
    """Connect lazily to *uri*; server selection is bounded by *timeout*."""

    return MongoClient(
        uri,
        serverSelectionTimeoutMS=int(timeout * 1000),
    )


def fetch(
    provider: Provider,
    category: Category,
    authorization: str | None,
    coordinate: Coordinate,
    *,
    trace_id: str | None = None,
) -> ConfigResult:
    """Authenticate and resolve *category* for *coordinate*.

    ``login`` always runs first, so credential failures surface before any
    scope address is touched. Errors propagate unchanged.
    """

    bind_trace_id(trace_id)
    coordinate.require_complete()
    token = provider.login(authorization)
    operation = _operation(provider, category)
    try:
        return operation(token, coordinate)
    except ConfigServerError as exc:
        log_error("fetch_failed", category=category.value, project=coordinate.project_name, kind=exc.kind, error=str(exc))
        raise


def search(
    provider: Provider,
    authorization: str | None,
    project_name: str | None = None,
    *,
    trace_id: str | None = None,
) -> list[Coordinate]:
    """Authenticate and enumerate services of *project_name* (or all projects)."""

    bind_trace_id(trace_id)
    token = provider.login(authorization)
    services = provider.search_services(token, project_name or None)
    log_info("services_listed", project=project_name, services=len(services))
    return services


def status_for(error: BaseException) -> int:
    """Return the HTTP status the boundary reports for *error*.

    Examples
    --------
    >>> status_for(Unauthorized("no credentials"))
    401
    >>> status_for(UpstreamError("boom", status_code=503))
    500
    """

    if isinstance(error, Unauthorized):
        return HTTP_UNAUTHORIZED
    return HTTP_INTERNAL_ERROR


def error_payload(error: BaseException) -> dict[str, Any]:
    """Return the JSON error body for *error*.

    The backend's status and message are kept verbatim for upstream errors so
    operators can see what the backend actually said.

    Examples
    --------
    >>> error_payload(UpstreamError("permission denied", status_code=403))["upstreamStatus"]
    403
    """

    kind = getattr(error, "kind", "error")
    message = getattr(error, "message", None) or str(error)
    payload: dict[str, Any] = {
        "statusCode": status_for(error),
        "code": kind,
        "message": message,
        "description": type(error).__name__,
    }
    if isinstance(error, UpstreamError) and error.status_code is not None:
        payload["upstreamStatus"] = error.status_code
    return payload


def _operation(provider: Provider, category: Category) -> Callable[[str | None, Coordinate], ConfigResult]:
    if category is Category.CONFIGS:
        return provider.fetch_configs
    if category is Category.CERTS:
        return provider.fetch_certificates
    return provider.fetch_files


__all__ = [
    "create_provider",
    "error_payload",
    "fetch",
    "open_mongo_client",
    "search",
    "status_for",
]
