"""Git contents API provider tests against a mocked ``httpx`` backend."""

from __future__ import annotations

import base64

import httpx
import pytest
import respx

from lib_config_server.adapters.providers.git import GitProvider
from lib_config_server.adapters.providers.http import HttpTransport
from lib_config_server.domain.errors import BackendUnavailable, ParseError, Unauthorized, UpstreamError
from tests.support import COORDINATE

API_HOST = "https://git.example"
REPO = "/repos/acme/light-service-configs-retail-dev/contents"
TOKEN = "Bearer gho_token"


def _content(text: str | bytes) -> dict[str, str]:
    raw = text.encode("utf-8") if isinstance(text, str) else text
    encoded = base64.encodebytes(raw).decode("ascii")
    return {"content": encoded, "encoding": "base64"}


@pytest.fixture()
def backend():
    with respx.mock(base_url=API_HOST, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture()
def provider() -> GitProvider:
    transport = HttpTransport(httpx.Client(base_url=API_HOST), backend="git")
    return GitProvider(transport, repo_owner="acme", context_root="repos")


def _catch_all(backend) -> None:
    backend.route().respond(404, json={"message": "Not Found"})


def test_login_requires_bearer(provider: GitProvider) -> None:
    assert provider.login(TOKEN) == TOKEN
    assert provider.login("bearer lower") == "bearer lower"
    for value in (None, "", "Basic dXNlcjpw", "token abc"):
        with pytest.raises(Unauthorized):
            provider.login(value)


def test_service_overrides_globals(backend, provider: GitProvider) -> None:
    backend.get(f"{REPO}/configs/globals/v1/values.yml").respond(json=_content("name: global\nglobal: g\n"))
    service_route = backend.get(f"{REPO}/configs/api-customers/v2/values.yml").respond(
        json=_content("name: svc\nservice: s\n")
    )
    _catch_all(backend)

    result = provider.fetch_configs(TOKEN, COORDINATE)

    assert result.properties == {"name": "svc", "global": "g", "service": "s"}
    assert service_route.calls.last.request.headers["Authorization"] == TOKEN


def test_missing_globals_returns_service_only(backend, provider: GitProvider) -> None:
    backend.get(f"{REPO}/configs/api-customers/v2/values.json").respond(json=_content('{"port": 8443}'))
    _catch_all(backend)

    result = provider.fetch_configs(TOKEN, COORDINATE)

    assert result.properties == {"port": 8443}


def test_certificates_are_listed_then_fetched(backend, provider: GitProvider) -> None:
    directory = f"{REPO}/certs/globals/v1"
    backend.get(directory).respond(
        json=[
            {"name": "client.keystore", "type": "file"},
            {"name": "archive", "type": "dir"},
        ]
    )
    backend.get(f"{directory}/client.keystore").respond(json=_content(bytes([1, 2])))
    _catch_all(backend)

    result = provider.fetch_certificates(TOKEN, COORDINATE)

    assert result.properties == {"client.keystore": "AQI="}


def test_malformed_payload_aborts(backend, provider: GitProvider) -> None:
    backend.get(f"{REPO}/configs/globals/v1/values.yml").respond(json=_content("port: [unclosed\n"))
    _catch_all(backend)

    with pytest.raises(ParseError):
        provider.fetch_configs(TOKEN, COORDINATE)


def test_listing_must_be_an_array(backend, provider: GitProvider) -> None:
    backend.get(f"{REPO}/files/globals/v1").respond(json={"name": "values.yml"})
    _catch_all(backend)

    with pytest.raises(ParseError):
        provider.fetch_files(TOKEN, COORDINATE)


def test_upstream_status_and_message_preserved(backend, provider: GitProvider) -> None:
    backend.get(f"{REPO}/configs/globals/v1/values.yml").respond(403, json={"message": "Bad credentials"})
    _catch_all(backend)

    with pytest.raises(UpstreamError) as captured:
        provider.fetch_configs(TOKEN, COORDINATE)

    assert captured.value.status_code == 403
    assert captured.value.message == "Bad credentials"


def test_connection_failure_is_backend_unavailable(backend, provider: GitProvider) -> None:
    backend.route().mock(side_effect=httpx.ConnectError)

    with pytest.raises(BackendUnavailable):
        provider.fetch_configs(TOKEN, COORDINATE)


def test_repository_template_is_applied(backend) -> None:
    transport = HttpTransport(httpx.Client(base_url=API_HOST), backend="git")
    provider = GitProvider(transport, repo_owner="acme", context_root="repos", repo_name_template="cfg-{environment}")
    route = backend.get("/repos/acme/cfg-dev/contents/configs/globals/v1/values.yml").respond(json=_content("a: 1\n"))
    _catch_all(backend)

    assert provider.fetch_configs(TOKEN, COORDINATE).properties == {"a": 1}
    assert route.called


def test_search_is_not_supported(provider: GitProvider) -> None:
    assert provider.search_services(TOKEN, "retail") == []
