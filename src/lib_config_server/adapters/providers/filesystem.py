"""Provider backed by a local directory tree.

Intended for local development and tests. No authentication is performed.
Expected layout below ``service_configs_dir``::

    configs/<project>/globals/<projectVersion>/<env>/values.yml
    configs/<project>/<service>/<serviceVersion>/<env>/values.yml
    certs/<project>/globals/<projectVersion>/<env>/client.keystore
    certs/<project>/<service>/<serviceVersion>/<env>/client.truststore
    files/<project>/globals/<projectVersion>/<env>/logback.xml
    files/<project>/<service>/<serviceVersion>/<env>/hibernate.properties
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from ...domain.errors import BackendUnavailable, NotFound
from ...domain.models import Category, Coordinate, Scope
from ...observability import log_debug, make_event
from ..decoders.structured import decoder_for, encode_blob, read_file
from ..path_builders.default import config_file_names, filesystem_path
from .base import BaseProvider


class FileSystemProvider(BaseProvider):
    """Read configs, certs and files from ``service_configs_dir``."""

    name = "filesystem"

    def __init__(self, service_configs_dir: Path | str) -> None:
        self._root = Path(service_configs_dir)

    @property
    def root(self) -> Path:
        return self._root

    def _fetch_configs_scope(self, token: str | None, coordinate: Coordinate, scope: Scope) -> Mapping[str, object]:
        directory = filesystem_path(self._root, coordinate, Category.CONFIGS, scope)
        for file_name in config_file_names():
            candidate = directory / file_name
            try:
                payload = read_file(candidate)
            except NotFound:
                continue
            except OSError as exc:
                raise BackendUnavailable(f"Cannot read {candidate}: {exc}") from exc
            return decoder_for(file_name).decode(payload, source=str(candidate))
        raise NotFound(f"No configs file in {directory}")

    def _fetch_blobs_scope(
        self, token: str | None, coordinate: Coordinate, category: Category, scope: Scope
    ) -> Mapping[str, object]:
        directory = filesystem_path(self._root, coordinate, category, scope)
        if not directory.is_dir():
            raise NotFound(f"Directory not found: {directory}")
        blobs: dict[str, object] = {}
        try:
            for entry in sorted(directory.iterdir()):
                if entry.is_file():
                    blobs[entry.name] = encode_blob(entry.read_bytes())
        except OSError as exc:
            raise BackendUnavailable(f"Cannot read files from {directory}: {exc}") from exc
        log_debug("directory_listed", **make_event(scope.value, str(directory), {"files": len(blobs)}))
        return blobs
