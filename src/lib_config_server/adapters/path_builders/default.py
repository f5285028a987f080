"""Path and key builders for every backend.

Purpose
-------
Map a :class:`~lib_config_server.domain.models.Coordinate`, a category and a
scope to a backend-native address. All functions are pure and deterministic so
the addressing scheme can be tested without touching storage or the network.

Layout
------
Every backend follows the same shape, modulo separators and prefixes::

    <root>/<category>/<projectName>/<scopeName>/<scopeVersion>/<environment>

``scopeName`` is ``globals`` for the globals scope (addressed with the project
version) and the service name for the service scope (addressed with the
service version). Git repositories are created per project and environment, so
the Git endpoint drops those two segments and encodes them in the repository
name instead.

Contents
--------
* :data:`CONFIG_EXTENSIONS` / :func:`config_file_names` – ordered probes for
  structured configs files.
* :func:`filesystem_path`, :func:`document_key`, :func:`url_path`,
  :func:`vault_secret_path`, :func:`vault_metadata_path`,
  :func:`git_contents_endpoint` – per-backend builders.
* :func:`git_repository_name` – repository identity templating.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final, Iterator

from ...domain.models import Category, Coordinate, Scope

SEPARATOR: Final[str] = "/"
CONFIGS_BASENAME: Final[str] = "values"
CONFIG_EXTENSIONS: Final[tuple[str, ...]] = (".yml", ".yaml", ".json")

PROJECT_NAME_PLACEHOLDER: Final[str] = "{projectName}"
ENVIRONMENT_PLACEHOLDER: Final[str] = "{environment}"
GIT_REPOSITORY_PREFIX: Final[str] = "light-service-configs-"
GIT_CONTENTS_SEGMENT: Final[str] = "contents"

VAULT_API_PREFIX: Final[str] = "/v1"
VAULT_LOGIN_PATH: Final[str] = "/v1/auth/userpass/login/{username}"


def config_file_names() -> Iterator[str]:
    """Yield configs file names in probing order.

    Examples
    --------
    >>> list(config_file_names())
    ['values.yml', 'values.yaml', 'values.json']
    """

    for extension in CONFIG_EXTENSIONS:
        yield CONFIGS_BASENAME + extension


def address_segments(coordinate: Coordinate, category: Category, scope: Scope) -> tuple[str, ...]:
    """Return ``(category, project, scope name, scope version, environment)``.

    Raises
    ------
    ValueError
        When the coordinate is missing any field needed to build a fetch path.

    Examples
    --------
    >>> address_segments(Coordinate("retail", "v1", "orders", "v3", "dev"), Category.CERTS, Scope.SERVICE)
    ('certs', 'retail', 'orders', 'v3', 'dev')
    """

    coordinate.require_complete()
    name, version = coordinate.scope_segments(scope)
    return (category.value, coordinate.project_name, name, version, str(coordinate.environment))


def filesystem_path(root: Path | str, coordinate: Coordinate, category: Category, scope: Scope) -> Path:
    """Return the directory holding *scope* content below ``service_configs_dir``."""

    return Path(root).joinpath(*address_segments(coordinate, category, scope))


def document_key(coordinate: Coordinate, category: Category, scope: Scope) -> str:
    """Return the ``_id`` of the document holding *scope* content.

    Examples
    --------
    >>> document_key(Coordinate("eaap", "0.0.1", "orders", "1.0.0", "dev"), Category.FILES, Scope.GLOBALS)
    'files/eaap/globals/0.0.1/dev'
    """

    return SEPARATOR.join(address_segments(coordinate, category, scope))


def url_path(base_dir: str, coordinate: Coordinate, category: Category, scope: Scope) -> str:
    """Return the URL path of the *scope* directory served by a plain HTTP server.

    Examples
    --------
    >>> url_path("/configs-root/", Coordinate("retail", "v1", "orders", "v3", "dev"), Category.CONFIGS, Scope.GLOBALS)
    '/configs-root/configs/retail/globals/v1/dev'
    """

    return _join(base_dir, *address_segments(coordinate, category, scope))


def vault_secret_path(coordinate: Coordinate, category: Category, scope: Scope) -> str:
    """Return the KV v2 data path; each category is its own secret engine mount.

    Examples
    --------
    >>> vault_secret_path(Coordinate("retail", "v1", "orders", "v3", "dev"), Category.CONFIGS, Scope.SERVICE)
    '/v1/configs/data/retail/orders/v3/dev'
    """

    category_segment, *rest = address_segments(coordinate, category, scope)
    return _join(VAULT_API_PREFIX, category_segment, "data", *rest)


def vault_metadata_path(project_name: str | None = None) -> str:
    """Return the KV v2 metadata path used to list services.

    Examples
    --------
    >>> vault_metadata_path("retail")
    '/v1/configs/metadata/retail'
    >>> vault_metadata_path(None)
    '/v1/configs/metadata/'
    """

    base = _join(VAULT_API_PREFIX, Category.CONFIGS.value, "metadata")
    if not project_name:
        return base + SEPARATOR
    return _join(base, project_name)


def vault_login_path(username: str) -> str:
    return VAULT_LOGIN_PATH.replace("{username}", username)


def git_repository_name(coordinate: Coordinate, template: str | None = None) -> str:
    """Return the repository that holds *coordinate*'s project/environment pair.

    A configured *template* has its ``{projectName}`` and ``{environment}``
    placeholders substituted; a blank template falls back to the
    ``light-service-configs-{projectName}-{environment}`` convention.

    Examples
    --------
    >>> coordinate = Coordinate("retail", environment="dev")
    >>> git_repository_name(coordinate, "light-service-configs-{projectName}-{environment}")
    'light-service-configs-retail-dev'
    >>> git_repository_name(coordinate)
    'light-service-configs-retail-dev'
    >>> git_repository_name(coordinate, "shared-configs")
    'shared-configs'
    """

    if not coordinate.environment:
        raise ValueError("Coordinate is missing required fields: environment")
    if template is None or not template.strip():
        return f"{GIT_REPOSITORY_PREFIX}{coordinate.project_name}-{coordinate.environment}"
    return template.replace(PROJECT_NAME_PLACEHOLDER, coordinate.project_name).replace(
        ENVIRONMENT_PLACEHOLDER, coordinate.environment
    )


def git_contents_endpoint(
    context_root: str | None,
    owner: str,
    repository: str,
    coordinate: Coordinate,
    category: Category,
    scope: Scope,
) -> str:
    """Return the Git contents API endpoint for the *scope* directory.

    Examples
    --------
    >>> git_contents_endpoint(
    ...     "repos", "acme", "light-service-configs-retail-dev",
    ...     Coordinate("retail", "v1", "orders", "v3", "dev"), Category.CONFIGS, Scope.GLOBALS,
    ... )
    '/repos/acme/light-service-configs-retail-dev/contents/configs/globals/v1'
    """

    category_segment, _project, name, version, _environment = address_segments(coordinate, category, scope)
    return _join(SEPARATOR, context_root or "", owner, repository, GIT_CONTENTS_SEGMENT, category_segment, name, version)


def child(address: str, name: str) -> str:
    """Append *name* to a slash-separated *address*.

    Examples
    --------
    >>> child("/files/retail/globals/v1/dev/", "logback.xml")
    '/files/retail/globals/v1/dev/logback.xml'
    """

    return _join(address, name)


def _join(*parts: str) -> str:
    """Join *parts* with single slashes, keeping a leading slash when present."""

    leading = SEPARATOR if parts and parts[0].startswith(SEPARATOR) else ""
    cleaned = [part.strip(SEPARATOR) for part in parts]
    return leading + SEPARATOR.join(part for part in cleaned if part)
