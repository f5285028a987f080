"""Adapter contract tests for the provider port.

Every backend variant must satisfy :class:`lib_config_server.application.ports.Provider`
so the composition root can swap them without the request path noticing.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from lib_config_server.adapters.providers.base import BaseProvider
from lib_config_server.adapters.providers.filesystem import FileSystemProvider
from lib_config_server.adapters.providers.git import GitProvider
from lib_config_server.adapters.providers.http import HttpTransport
from lib_config_server.adapters.providers.mongodb import MongoDBProvider
from lib_config_server.adapters.providers.url import UrlProvider
from lib_config_server.adapters.providers.vault import VaultProvider
from lib_config_server.application import ports
from lib_config_server.domain.models import Scope
from tests.support import COORDINATE, InMemoryCollection


def _transport(name: str) -> HttpTransport:
    return HttpTransport(httpx.Client(base_url="http://backend.invalid"), backend=name)


@pytest.fixture(params=["filesystem", "git", "vault", "mongodb", "url"])
def provider(request, tmp_path: Path) -> BaseProvider:
    builders = {
        "filesystem": lambda: FileSystemProvider(tmp_path),
        "git": lambda: GitProvider(_transport("git"), repo_owner="acme"),
        "vault": lambda: VaultProvider(_transport("vault")),
        "mongodb": lambda: MongoDBProvider(InMemoryCollection()),
        "url": lambda: UrlProvider(_transport("url")),
    }
    return builders[request.param]()


def test_every_variant_satisfies_the_port(provider: BaseProvider) -> None:
    assert isinstance(provider, ports.Provider)
    assert provider.name in {"filesystem", "git", "vault", "mongodb", "url"}


def test_base_provider_requires_scope_fetchers() -> None:
    base = BaseProvider()
    with pytest.raises(NotImplementedError):
        base._fetch_configs_scope(None, COORDINATE, Scope.GLOBALS)
