"""Provider backed by a Vault-style KV v2 secret store.

Three KV v2 secret engines are mounted as ``configs``, ``certs`` and ``files``.
Secrets follow ``<project>/<service>/<serviceVersion>/<environment>``, with
``globals`` in place of the service name for project-wide values::

    retail/globals/v1/dev
    retail/api-customers/v1/dev

Login exchanges an HTTP Basic credential for a client token through the
``userpass`` auth method; every other request sends that token in the
``X-Vault-Token`` header. This is the only backend with a listing primitive,
so it is the only one that supports :meth:`VaultProvider.search_services`.
"""

from __future__ import annotations

import base64
from typing import Any, Mapping

from ...domain.errors import NotFound, ParseError, Unauthorized, UpstreamError
from ...domain.models import Category, Coordinate, Scope
from ...observability import log_error, log_info
from ..path_builders.default import SEPARATOR, vault_login_path, vault_metadata_path, vault_secret_path
from .base import BaseProvider
from .http import HttpTransport

TOKEN_HEADER = "X-Vault-Token"
BASIC_SCHEME = "basic"


def extract_basic_credentials(authorization: str | None) -> tuple[str, str]:
    """Return ``(username, password)`` from a ``Basic`` authorization value.

    Raises
    ------
    Unauthorized
        When the value is absent, uses another scheme, or is not valid
        ``base64(username:password)``.

    Examples
    --------
    >>> extract_basic_credentials("Basic dXNlcjpzM2NyZXQ=")
    ('user', 's3cret')
    """

    if not authorization or not authorization.lower().startswith(BASIC_SCHEME):
        raise Unauthorized("Basic credentials are required for the vault provider")
    encoded = authorization[len(BASIC_SCHEME) :].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except ValueError as exc:  # binascii.Error, UnicodeDecodeError, non-ASCII input
        raise Unauthorized("Malformed basic credentials") from exc
    username, separator, password = decoded.partition(":")
    if not separator or not username:
        raise Unauthorized("Malformed basic credentials")
    return username, password


class VaultProvider(BaseProvider):
    """Resolve coordinates from KV v2 secrets."""

    name = "vault"

    def __init__(self, transport: HttpTransport) -> None:
        self._transport = transport

    def close(self) -> None:
        self._transport.close()

    def login(self, authorization: str | None) -> str | None:
        """Exchange Basic credentials for a client token.

        The credential is validated before any request is sent. A rejected
        login (any non-2xx answer) is reported as :class:`Unauthorized`.
        """

        try:
            username, password = extract_basic_credentials(authorization)
        except Unauthorized:
            log_error("login_rejected", backend=self.name, reason="malformed credentials")
            raise
        path = vault_login_path(username)
        log_info("vault_login", backend=self.name, address=path, username=username)
        try:
            body = self._transport.post_json(path, body={"password": password})
        except (NotFound, UpstreamError) as exc:
            raise Unauthorized(f"Vault rejected the login for {username}: {exc}") from exc
        token = _dig(body, "auth", "client_token")
        if not isinstance(token, str) or not token:
            raise ParseError("Vault login response has no auth.client_token")
        return token

    def _fetch_configs_scope(self, token: str | None, coordinate: Coordinate, scope: Scope) -> Mapping[str, object]:
        return self._secret(token, vault_secret_path(coordinate, Category.CONFIGS, scope))

    def _fetch_blobs_scope(
        self, token: str | None, coordinate: Coordinate, category: Category, scope: Scope
    ) -> Mapping[str, object]:
        return self._secret(token, vault_secret_path(coordinate, category, scope))

    def search_services(self, token: str | None, project_name: str | None) -> list[Coordinate]:
        """List services of *project_name*, or of every project when it is ``None``.

        At the root, keys ending with ``/`` are projects whose services are
        listed one level down; other keys are leaf secrets reported as a
        project fragment without a service.
        """

        if project_name:
            return [Coordinate(project_name, service_name=_strip(key)) for key in self._list_keys(token, project_name)]

        services: list[Coordinate] = []
        for key in self._list_keys(token, None):
            if key.endswith(SEPARATOR):
                project = _strip(key)
                services.extend(Coordinate(project, service_name=_strip(item)) for item in self._list_keys(token, project))
            else:
                services.append(Coordinate(key))
        return services

    def _secret(self, token: str | None, path: str) -> dict[str, object]:
        body = self._transport.get_json(path, headers=_headers(token))
        data = _dig(body, "data", "data")
        if not isinstance(data, Mapping):
            raise ParseError(f"Vault secret {path} has no data.data mapping")
        return dict(data)

    def _list_keys(self, token: str | None, project_name: str | None) -> list[str]:
        path = vault_metadata_path(project_name)
        try:
            body = self._transport.get_json(path, headers=_headers(token), params={"list": "true"})
        except NotFound:
            return []
        keys = _dig(body, "data", "keys")
        if not isinstance(keys, list) or not all(isinstance(key, str) for key in keys):
            raise ParseError(f"Vault listing {path} has no data.keys list")
        return keys


def _dig(body: Any, *keys: str) -> Any:
    """Follow *keys* through nested mappings, returning ``None`` on a miss."""

    node = body
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def _strip(key: str) -> str:
    return key.rstrip(SEPARATOR)


def _headers(token: str | None) -> dict[str, str]:
    return {TOKEN_HEADER: token} if token else {}
