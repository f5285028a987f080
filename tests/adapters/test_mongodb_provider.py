"""MongoDB provider tests using an in-memory collection double."""

from __future__ import annotations

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from lib_config_server.adapters.providers.mongodb import MongoDBProvider
from lib_config_server.domain.errors import BackendUnavailable, ParseError, UpstreamError
from tests.support import COORDINATE, InMemoryCollection

GLOBALS_CONFIGS = "configs/retail/globals/v1/dev"
SERVICE_CONFIGS = "configs/retail/api-customers/v2/dev"


def test_service_overrides_globals() -> None:
    collection = InMemoryCollection()
    collection.insert(GLOBALS_CONFIGS, [{"configName": "values.yml", "content": "name: global\nglobal: g\n"}])
    collection.insert(SERVICE_CONFIGS, [{"configName": "values.json", "content": '{"name": "svc", "service": "s"}'}])

    result = MongoDBProvider(collection).fetch_configs(None, COORDINATE)

    assert result.properties == {"name": "svc", "global": "g", "service": "s"}
    assert collection.queries == [{"_id": GLOBALS_CONFIGS}, {"_id": SERVICE_CONFIGS}]


def test_configs_entry_follows_probe_order() -> None:
    collection = InMemoryCollection()
    collection.insert(
        GLOBALS_CONFIGS,
        [
            {"configName": "values.json", "content": '{"from": "json"}'},
            {"configName": "values.yml", "content": "from: yml\n"},
            {"configName": "notes.txt", "content": "ignored"},
        ],
    )

    assert MongoDBProvider(collection).fetch_configs(None, COORDINATE).properties == {"from": "yml"}


def test_document_without_values_file_contributes_nothing() -> None:
    collection = InMemoryCollection()
    collection.insert(GLOBALS_CONFIGS, [{"configName": "logback.xml", "content": "<xml/>"}])

    assert MongoDBProvider(collection).fetch_configs(None, COORDINATE).properties == {}


def test_certificates_are_base64_encoded() -> None:
    collection = InMemoryCollection()
    collection.insert("certs/retail/globals/v1/dev", [{"configName": "client.keystore", "content": bytes([1, 2])}])
    collection.insert("certs/retail/api-customers/v2/dev", [{"configName": "client.truststore", "content": "trust"}])

    result = MongoDBProvider(collection).fetch_certificates(None, COORDINATE)

    assert result.properties == {"client.keystore": "AQI=", "client.truststore": "dHJ1c3Q="}


def test_missing_documents_yield_empty_result() -> None:
    assert MongoDBProvider(InMemoryCollection()).fetch_files(None, COORDINATE).properties == {}


@pytest.mark.parametrize(
    "document_configs",
    [None, "values.yml", [{"configName": "values.yml"}], [{"content": "a: 1"}], ["values.yml"]],
)
def test_malformed_documents_are_parse_errors(document_configs) -> None:
    collection = InMemoryCollection(documents={GLOBALS_CONFIGS: {"_id": GLOBALS_CONFIGS, "configs": document_configs}})

    with pytest.raises(ParseError):
        MongoDBProvider(collection).fetch_configs(None, COORDINATE)


def test_unreachable_server_is_backend_unavailable() -> None:
    collection = InMemoryCollection(error=ServerSelectionTimeoutError("no servers"))

    with pytest.raises(BackendUnavailable):
        MongoDBProvider(collection).fetch_configs(None, COORDINATE)


def test_driver_failure_is_upstream_error() -> None:
    collection = InMemoryCollection(error=OperationFailure("not authorized"))

    with pytest.raises(UpstreamError) as captured:
        MongoDBProvider(collection).fetch_files(None, COORDINATE)

    assert captured.value.status_code is None
    assert "not authorized" in captured.value.message


def test_no_authentication_and_no_search() -> None:
    provider = MongoDBProvider(InMemoryCollection())
    assert provider.login("Bearer x") is None
    assert provider.search_services(None, None) == []


class _RecordingClient:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_close_releases_the_owned_client() -> None:
    client = _RecordingClient()
    MongoDBProvider(InMemoryCollection(), client=client).close()
    assert client.closed


def test_close_without_owned_client_is_a_no_op() -> None:
    MongoDBProvider(InMemoryCollection()).close()
