from __future__ import annotations

import dataclasses
import json

import pytest

from parquet_sink.pipeline.sink_config import RawSinkConfig, SinkConfig
from parquet_sink.utils.exceptions import (
    ConfigError,
    InvalidCodecError,
    MacroResolutionError,
    SchemaParseError,
)


def test_from_dict_maps_external_keys(scenario_schema_text: str):
    raw = RawSinkConfig.from_dict({
        "name": "events",
        "basePath": "/data/events",
        "schema": scenario_schema_text,
        "compressionCodec": "snappy",
    })
    config = raw.resolve()

    assert config == SinkConfig(
        name="events",
        schema=scenario_schema_text,
        base_path="/data/events",
        compression_codec="snappy",
    )


def test_schema_macro_resolved_from_context(scenario_schema_text: str):
    raw = RawSinkConfig(name="events", schema="${events.schema}")
    config = raw.resolve({"events.schema": scenario_schema_text})
    assert config.schema == scenario_schema_text


def test_macros_resolved_inside_larger_values():
    raw = RawSinkConfig(name="${env}_events", schema="{}", base_path="/data/${env}/events")
    config = raw.resolve({"env": "prod"})
    assert config.name == "prod_events"
    assert config.base_path == "/data/prod/events"


def test_unresolved_macro_is_an_error():
    raw = RawSinkConfig(name="events", schema="${events.schema}")
    with pytest.raises(MacroResolutionError) as exc:
        raw.resolve({})
    assert exc.value.macro == "events.schema"
    assert exc.value.field_name == "schema"


@pytest.mark.parametrize(
    "data",
    [
        {"schema": "{}"},
        {"name": "", "schema": "{}"},
        {"name": "events"},
        {"name": "events", "schema": ""},
    ],
)
def test_required_fields_enforced(data: dict):
    with pytest.raises(ConfigError):
        RawSinkConfig.from_dict(data).resolve()


def test_inline_schema_object_is_serialized():
    schema = {"type": "record", "name": "r", "fields": [{"name": "a", "type": "int"}]}
    raw = RawSinkConfig.from_dict({"name": "events", "schema": schema})
    assert json.loads(raw.schema) == schema


def test_non_string_value_rejected():
    raw = RawSinkConfig(name="events", schema="{}", compression_codec=5)
    with pytest.raises(ConfigError, match="compressionCodec"):
        raw.resolve()


def test_empty_optional_values_become_none(scenario_schema_text: str):
    config = RawSinkConfig(
        name="events", schema=scenario_schema_text, base_path="", compression_codec=""
    ).resolve()
    assert config.base_path is None
    assert config.compression_codec is None


def test_validate_returns_schema(scenario_schema_text: str):
    schema = SinkConfig(name="events", schema=scenario_schema_text).validate()
    assert schema.field_names() == ["id", "name"]


def test_validate_rejects_unknown_codec(scenario_schema_text: str):
    config = SinkConfig(name="events", schema=scenario_schema_text, compression_codec="bzip3")
    with pytest.raises(InvalidCodecError, match="bzip3"):
        config.validate()


def test_validate_rejects_bad_schema():
    with pytest.raises(SchemaParseError):
        SinkConfig(name="events", schema="{oops").validate()


def test_resolved_config_is_immutable(scenario_schema_text: str):
    config = SinkConfig(name="events", schema=scenario_schema_text)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.name = "other"
