"""Provider backed by a MongoDB collection.

Each scope is one document whose ``_id`` is the slash-joined address
(``files/eaap/globals/0.0.1/dev``) and whose ``configs`` array holds the
files of that scope::

    {
        "_id": "configs/retail/globals/v1/dev",
        "configs": [
            {"configName": "values.yml", "content": "server:\\n  port: 8443\\n"}
        ]
    }

Configs are read from the first ``values.yml``/``values.yaml``/``values.json``
entry; certs and files return every entry base64-encoded.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from pymongo.errors import ConnectionFailure, PyMongoError

from ...domain.errors import BackendUnavailable, NotFound, ParseError, UpstreamError
from ...domain.models import Category, Coordinate, Scope
from ...observability import log_debug, log_error, make_event
from ..decoders.structured import decoder_for, encode_blob
from ..path_builders.default import config_file_names, document_key
from .base import BaseProvider

CONFIGS_FIELD = "configs"
NAME_FIELD = "configName"
CONTENT_FIELD = "content"


class DocumentCollection(Protocol):
    """The subset of ``pymongo.collection.Collection`` used by the provider."""

    def find_one(self, filter: Mapping[str, Any]) -> Mapping[str, Any] | None: ...


class ClosableClient(Protocol):
    """The subset of ``pymongo.MongoClient`` needed to release its pool."""

    def close(self) -> None: ...


class MongoDBProvider(BaseProvider):
    """Resolve coordinates from documents keyed by address."""

    name = "mongodb"

    def __init__(self, collection: DocumentCollection, *, client: ClosableClient | None = None) -> None:
        self._collection = collection
        self._client = client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def _fetch_configs_scope(self, token: str | None, coordinate: Coordinate, scope: Scope) -> Mapping[str, object]:
        key = document_key(coordinate, Category.CONFIGS, scope)
        entries = self._entries(key)
        for file_name in config_file_names():
            if file_name in entries:
                return decoder_for(file_name).decode(entries[file_name], source=f"{key}#{file_name}")
        raise NotFound(f"Document {key} has no configs file")

    def _fetch_blobs_scope(
        self, token: str | None, coordinate: Coordinate, category: Category, scope: Scope
    ) -> Mapping[str, object]:
        key = document_key(coordinate, category, scope)
        return {name: encode_blob(content) for name, content in self._entries(key).items()}

    def _entries(self, key: str) -> dict[str, bytes]:
        """Return ``{configName: content bytes}`` stored in the document *key*."""

        try:
            document = self._collection.find_one({"_id": key})
        except ConnectionFailure as exc:
            log_error("backend_unreachable", backend=self.name, address=key, error=str(exc))
            raise BackendUnavailable(f"Could not connect to mongodb: {exc}") from exc
        except PyMongoError as exc:
            log_error("backend_error", backend=self.name, address=key, error=str(exc))
            raise UpstreamError(str(exc)) from exc
        if not document:
            raise NotFound(f"No document with key {key}")

        configs = document.get(CONFIGS_FIELD)
        if not isinstance(configs, list):
            raise ParseError(f"Document {key} has no {CONFIGS_FIELD} array")
        entries: dict[str, bytes] = {}
        for entry in configs:
            name = entry.get(NAME_FIELD) if isinstance(entry, Mapping) else None
            content = entry.get(CONTENT_FIELD) if isinstance(entry, Mapping) else None
            if not isinstance(name, str) or not isinstance(content, (str, bytes)):
                raise ParseError(f"Document {key} has a malformed {CONFIGS_FIELD} entry")
            entries[name] = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        log_debug("document_loaded", **make_event("document", key, {"entries": len(entries)}))
        return entries
