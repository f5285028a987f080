"""Shared fixtures-in-code for the backend provider tests.

Builds on-disk project trees for the filesystem provider and an in-memory
document collection that mimics the one ``pymongo`` call the MongoDB provider
makes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from lib_config_server.adapters.path_builders.default import filesystem_path
from lib_config_server.domain.models import Category, Coordinate, Scope

COORDINATE = Coordinate("retail", "v1", "api-customers", "v2", "dev")


@dataclass
class ConfigTree:
    """Directory tree laid out the way the filesystem provider reads it."""

    root: Path

    def write(self, coordinate: Coordinate, category: Category, scope: Scope, name: str, content: str | bytes) -> Path:
        directory = filesystem_path(self.root, coordinate, category, scope)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / name
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
        return target


def create_config_tree(tmp_path: Path) -> ConfigTree:
    root = tmp_path / "service-configs"
    root.mkdir(parents=True, exist_ok=True)
    return ConfigTree(root)


@dataclass
class InMemoryCollection:
    """Document store double answering ``find_one({"_id": key})``."""

    documents: dict[str, Mapping[str, Any]] = field(default_factory=dict)
    error: Exception | None = None
    queries: list[Mapping[str, Any]] = field(default_factory=list)

    def insert(self, key: str, configs: list[Mapping[str, Any]]) -> None:
        self.documents[key] = {"_id": key, "configs": configs}

    def find_one(self, filter: Mapping[str, Any]) -> Mapping[str, Any] | None:
        self.queries.append(dict(filter))
        if self.error is not None:
            raise self.error
        return self.documents.get(filter["_id"])
