"""Provider backed by a plain HTTP server exposing the filesystem layout.

Any static file server with directory listings works (nginx ``autoindex``,
``python -m http.server``). Configs files are probed by extension; certs and
files are discovered by scraping anchor text from the directory listing page.
The caller's ``Authorization`` value, if any, is forwarded unchanged.
"""

from __future__ import annotations

import html
import re
from typing import Final, Mapping

from ...domain.errors import NotFound
from ...domain.models import Category, Coordinate, Scope
from ...observability import log_debug
from ..decoders.structured import decoder_for, encode_blob
from ..path_builders.default import SEPARATOR, child, config_file_names, url_path
from .base import BaseProvider
from .http import HttpTransport

ANCHOR_PATTERN: Final[re.Pattern[str]] = re.compile(r">([^>/]+)</a>")


def listed_file_names(listing: str) -> list[str]:
    """Return file names linked from a directory listing page, in page order.

    Sub-directory links end with ``/`` and are skipped by the pattern.

    Examples
    --------
    >>> page = '<a href="../">../</a><a href="client.keystore">client.keystore</a><a href="sub/">sub/</a>'
    >>> listed_file_names(page)
    ['client.keystore']
    """

    names: list[str] = []
    for match in ANCHOR_PATTERN.findall(listing):
        name = html.unescape(match).strip()
        if name and name not in names:
            names.append(name)
    return names


class UrlProvider(BaseProvider):
    """Resolve coordinates from a static HTTP directory tree."""

    name = "url"

    def __init__(self, transport: HttpTransport, *, service_configs_dir: str = SEPARATOR) -> None:
        self._transport = transport
        self._base_dir = service_configs_dir

    def close(self) -> None:
        self._transport.close()

    def login(self, authorization: str | None) -> str | None:
        return authorization

    def _fetch_configs_scope(self, token: str | None, coordinate: Coordinate, scope: Scope) -> Mapping[str, object]:
        directory = url_path(self._base_dir, coordinate, Category.CONFIGS, scope)
        for file_name in config_file_names():
            endpoint = child(directory, file_name)
            try:
                response = self._transport.get(endpoint, headers=_headers(token))
            except NotFound:
                continue
            if not response.text.strip():
                continue
            return decoder_for(file_name).decode(response.content, source=endpoint)
        raise NotFound(f"No configs file under {directory}")

    def _fetch_blobs_scope(
        self, token: str | None, coordinate: Coordinate, category: Category, scope: Scope
    ) -> Mapping[str, object]:
        directory = url_path(self._base_dir, coordinate, category, scope)
        listing = self._transport.get(directory + SEPARATOR, headers=_headers(token)).text
        if not listing.strip():
            raise NotFound(f"Empty directory listing at {directory}")
        blobs: dict[str, object] = {}
        for file_name in listed_file_names(listing):
            try:
                content = self._transport.get(child(directory, file_name), headers=_headers(token)).content
            except NotFound:
                continue
            if content:
                blobs[file_name] = encode_blob(content)
        log_debug("directory_listed", address=directory, files=len(blobs))
        return blobs


def _headers(token: str | None) -> dict[str, str]:
    return {"Authorization": token} if token and token.strip() else {}
