"""Provider backed by a Git hosting REST API (GitHub-style contents endpoint).

One repository per project/environment pair, named by
:func:`~lib_config_server.adapters.path_builders.default.git_repository_name`.
Repository layout::

    configs/globals/<projectVersion>/values.yml
    configs/<service>/<serviceVersion>/values.yml
    certs/globals/<projectVersion>/client.keystore
    certs/<service>/<serviceVersion>/client.truststore
    files/globals/<projectVersion>/logback.xml
    files/<service>/<serviceVersion>/hibernate.properties

The caller must already hold a Git access token; it is passed through as the
``Authorization`` header on every request.
"""

from __future__ import annotations

from typing import Any, Mapping

from ...domain.errors import NotFound, ParseError, Unauthorized
from ...domain.models import Category, Coordinate, Scope
from ...observability import log_debug, log_error, make_event
from ..decoders.structured import decode_blob, decoder_for, normalise_blob
from ..path_builders.default import child, config_file_names, git_contents_endpoint, git_repository_name
from .base import BaseProvider
from .http import HttpTransport

CONTENT = "content"
NAME = "name"


class GitProvider(BaseProvider):
    """Resolve coordinates through the Git contents API.

    Parameters
    ----------
    transport:
        Transport whose client is bound to the Git API host.
    repo_owner:
        Organisation or user owning the configuration repositories.
    context_root:
        Path prefix before the owner (``repos`` for GitHub).
    repo_name_template:
        Optional repository name with ``{projectName}``/``{environment}``
        placeholders.
    """

    name = "git"

    def __init__(
        self,
        transport: HttpTransport,
        *,
        repo_owner: str,
        context_root: str | None = None,
        repo_name_template: str | None = None,
    ) -> None:
        self._transport = transport
        self._repo_owner = repo_owner
        self._context_root = context_root
        self._repo_name_template = repo_name_template

    def close(self) -> None:
        self._transport.close()

    def login(self, authorization: str | None) -> str | None:
        """Accept ``Bearer`` credentials unchanged; reject anything else."""

        if authorization and authorization.lower().startswith("bearer"):
            return authorization
        log_error("login_rejected", backend=self.name, reason="bearer token required")
        raise Unauthorized("A bearer token is required for the git provider")

    def endpoint(self, coordinate: Coordinate, category: Category, scope: Scope) -> str:
        repository = git_repository_name(coordinate, self._repo_name_template)
        return git_contents_endpoint(self._context_root, self._repo_owner, repository, coordinate, category, scope)

    def _fetch_configs_scope(self, token: str | None, coordinate: Coordinate, scope: Scope) -> Mapping[str, object]:
        directory = self.endpoint(coordinate, Category.CONFIGS, scope)
        for file_name in config_file_names():
            endpoint = child(directory, file_name)
            try:
                encoded = self._file_content(token, endpoint)
            except NotFound:
                continue
            return decoder_for(file_name).decode(decode_blob(encoded, source=endpoint), source=endpoint)
        raise NotFound(f"No configs file in git directory {directory}")

    def _fetch_blobs_scope(
        self, token: str | None, coordinate: Coordinate, category: Category, scope: Scope
    ) -> Mapping[str, object]:
        directory = self.endpoint(coordinate, category, scope)
        blobs: dict[str, object] = {}
        for file_name in self._file_names(token, directory):
            endpoint = child(directory, file_name)
            try:
                encoded = self._file_content(token, endpoint)
            except NotFound:
                log_debug("file_vanished", **make_event(scope.value, endpoint))
                continue
            blobs[file_name] = normalise_blob(encoded, source=endpoint)
        return blobs

    def _file_names(self, token: str | None, directory: str) -> list[str]:
        listing = self._transport.get_json(directory, headers=_headers(token))
        if not isinstance(listing, list):
            raise ParseError(f"Expected a directory listing from {directory}")
        names = [
            str(entry[NAME])
            for entry in listing
            if isinstance(entry, Mapping) and entry.get(NAME) is not None and entry.get("type", "file") != "dir"
        ]
        log_debug("directory_listed", address=directory, files=len(names))
        return names

    def _file_content(self, token: str | None, endpoint: str) -> str:
        body: Any = self._transport.get_json(endpoint, headers=_headers(token))
        if not isinstance(body, Mapping) or not isinstance(body.get(CONTENT), str):
            raise ParseError(f"Git response for {endpoint} has no content field")
        return body[CONTENT]


def _headers(token: str | None) -> dict[str, str]:
    return {"Authorization": token} if token else {}
