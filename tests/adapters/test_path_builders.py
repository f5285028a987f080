"""Path/key builder tests: one address per (coordinate, category, scope)."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_config_server.adapters.path_builders.default import (
    address_segments,
    child,
    config_file_names,
    document_key,
    filesystem_path,
    git_contents_endpoint,
    git_repository_name,
    url_path,
    vault_login_path,
    vault_metadata_path,
    vault_secret_path,
)
from lib_config_server.domain.models import Category, Coordinate, Scope

COORDINATE = Coordinate("retail", "v1", "api-customers", "v2", "dev")
SEGMENT = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789.-", min_size=1, max_size=8)


def test_globals_use_project_version() -> None:
    assert address_segments(COORDINATE, Category.CONFIGS, Scope.GLOBALS) == ("configs", "retail", "globals", "v1", "dev")


def test_service_uses_service_version() -> None:
    assert address_segments(COORDINATE, Category.FILES, Scope.SERVICE) == ("files", "retail", "api-customers", "v2", "dev")


def test_incomplete_coordinate_never_produces_an_address() -> None:
    with pytest.raises(ValueError, match="service_version"):
        document_key(Coordinate("retail", "v1", "api-customers", None, "dev"), Category.CONFIGS, Scope.GLOBALS)


def test_filesystem_path(tmp_path: Path) -> None:
    assert filesystem_path(tmp_path, COORDINATE, Category.CERTS, Scope.SERVICE) == (
        tmp_path / "certs" / "retail" / "api-customers" / "v2" / "dev"
    )


def test_document_key() -> None:
    assert document_key(Coordinate("eaap", "0.0.1", "orders", "1.0.0", "dev"), Category.FILES, Scope.GLOBALS) == (
        "files/eaap/globals/0.0.1/dev"
    )


def test_url_path_tolerates_slashes_in_base() -> None:
    assert url_path("/", COORDINATE, Category.CONFIGS, Scope.SERVICE) == "/configs/retail/api-customers/v2/dev"
    assert url_path("/root/", COORDINATE, Category.CONFIGS, Scope.GLOBALS) == "/root/configs/retail/globals/v1/dev"


def test_vault_paths() -> None:
    assert vault_secret_path(COORDINATE, Category.CERTS, Scope.GLOBALS) == "/v1/certs/data/retail/globals/v1/dev"
    assert vault_metadata_path("retail") == "/v1/configs/metadata/retail"
    assert vault_metadata_path(None) == "/v1/configs/metadata/"
    assert vault_login_path("alice") == "/v1/auth/userpass/login/alice"


def test_git_endpoint_omits_project_and_environment() -> None:
    endpoint = git_contents_endpoint(
        "repos", "acme", "light-service-configs-retail-dev", COORDINATE, Category.CERTS, Scope.SERVICE
    )
    assert endpoint == "/repos/acme/light-service-configs-retail-dev/contents/certs/api-customers/v2"


def test_git_endpoint_without_context_root() -> None:
    endpoint = git_contents_endpoint(None, "acme", "configs", COORDINATE, Category.CONFIGS, Scope.GLOBALS)
    assert endpoint == "/acme/configs/contents/configs/globals/v1"


def test_repository_template_substitution() -> None:
    coordinate = Coordinate("retail", environment="dev")
    template = "light-service-configs-{projectName}-{environment}"
    assert git_repository_name(coordinate, template) == "light-service-configs-retail-dev"
    assert git_repository_name(coordinate, None) == "light-service-configs-retail-dev"
    assert git_repository_name(coordinate, "  ") == "light-service-configs-retail-dev"
    assert git_repository_name(coordinate, "{environment}-{projectName}") == "dev-retail"


def test_repository_name_requires_environment() -> None:
    with pytest.raises(ValueError):
        git_repository_name(Coordinate("retail"))


def test_config_file_probe_order() -> None:
    assert list(config_file_names()) == ["values.yml", "values.yaml", "values.json"]


def test_child_appends_single_separator() -> None:
    assert child("/a/b/", "c.txt") == "/a/b/c.txt"
    assert child("a/b", "c.txt") == "a/b/c.txt"


@given(SEGMENT, SEGMENT, SEGMENT, SEGMENT, SEGMENT, st.sampled_from(list(Category)), st.sampled_from(list(Scope)))
def test_addresses_are_deterministic(project, project_version, service, service_version, environment, category, scope) -> None:
    coordinate = Coordinate(project, project_version, service, service_version, environment)
    first = document_key(coordinate, category, scope)
    assert first == document_key(Coordinate(project, project_version, service, service_version, environment), category, scope)
    version = project_version if scope is Scope.GLOBALS else service_version
    assert first.split("/")[3] == version
    assert first.split("/")[0] == category.value
