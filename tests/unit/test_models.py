"""Coordinate and result value object tests."""

from __future__ import annotations

import json

import pytest

from lib_config_server.adapters.decoders.structured import YAMLDecoder
from lib_config_server.domain.models import Category, ConfigResult, Coordinate, Scope


def test_coordinate_from_query_takes_first_list_value() -> None:
    coordinate = Coordinate.from_query(
        {
            "project_name": ["retail", "ignored"],
            "project_version": "v1",
            "service_name": ["api-customers"],
            "service_version": "v2",
            "environment": "dev",
        }
    )
    assert coordinate == Coordinate("retail", "v1", "api-customers", "v2", "dev")


def test_coordinate_from_query_requires_project_name() -> None:
    with pytest.raises(ValueError):
        Coordinate.from_query({"environment": "dev"})


def test_require_complete_names_every_missing_field() -> None:
    with pytest.raises(ValueError) as captured:
        Coordinate("retail", environment="dev").require_complete()
    message = str(captured.value)
    for name in ("project_version", "service_name", "service_version"):
        assert name in message
    assert "environment" not in message


def test_blank_fields_count_as_missing() -> None:
    assert Coordinate("retail", "", "svc", "v1", "dev").missing_fields() == ["project_version"]


def test_scope_segments_use_matching_versions() -> None:
    coordinate = Coordinate("retail", "v1", "api-customers", "v2", "dev")
    assert coordinate.scope_segments(Scope.GLOBALS) == ("globals", "v1")
    assert coordinate.scope_segments(Scope.SERVICE) == ("api-customers", "v2")


def test_coordinate_serialises_with_camel_case_names() -> None:
    assert Coordinate("retail", service_name="orders").to_dict() == {
        "projectName": "retail",
        "projectVersion": None,
        "serviceName": "orders",
        "serviceVersion": None,
        "environment": None,
    }


def test_config_result_json_body() -> None:
    result = ConfigResult(Coordinate("retail", "v1", "orders", "v3", "dev"), {"port": 8443})
    body = json.loads(result.to_json())
    assert body["configProperties"] == {"port": 8443}
    assert body["service"]["serviceName"] == "orders"


def test_config_result_json_keeps_yaml_dates_and_binary_values() -> None:
    properties = YAMLDecoder().decode(b"release: 2024-01-01\nseed: !!binary aGVsbG8=\n", source="values.yml")
    body = json.loads(ConfigResult(Coordinate("retail"), properties).to_json(indent=2))
    assert body["configProperties"] == {"release": "2024-01-01", "seed": "aGVsbG8="}


def test_config_result_defaults_to_empty_properties() -> None:
    assert ConfigResult(Coordinate("retail")).properties == {}


def test_only_configs_is_structured() -> None:
    assert Category.CONFIGS.is_structured
    assert not Category.CERTS.is_structured
    assert not Category.FILES.is_structured
