from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pyarrow as pa
import pytest

from parquet_sink.pipeline.compression import CompressionCodec
from parquet_sink.pipeline.sink_config import SinkConfig
from parquet_sink.sinks.base import SinkState
from parquet_sink.sinks.registry import SinkRegistry
from parquet_sink.sinks.snapshot_parquet import SnapshotParquetSink
from parquet_sink.utils.exceptions import (
    ConfigError,
    InvalidCodecError,
    SchemaParseError,
    SinkStateError,
)


class RecordingDatasetCreator:
    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def create_dataset(self, name: str, properties: Dict[str, Any]) -> None:
        self.calls.append((name, properties))


@pytest.fixture()
def sink(scenario_schema_text: str) -> SnapshotParquetSink:
    return SnapshotParquetSink(
        SinkConfig(name="events", schema=scenario_schema_text, compression_codec="gzip")
    )


def test_lifecycle_moves_forward(sink: SnapshotParquetSink):
    assert sink.state is SinkState.UNCONFIGURED

    sink.validate()
    assert sink.state is SinkState.VALIDATED

    sink.configure()
    assert sink.state is SinkState.CONFIGURED

    sink.initialize()
    assert sink.state is SinkState.ACTIVE


def test_transform_before_initialize_is_rejected(sink: SnapshotParquetSink):
    sink.configure()
    with pytest.raises(SinkStateError, match="initialize"):
        sink.transform({"id": 1})


def test_initialize_hands_properties_to_dataset_layer(sink: SnapshotParquetSink):
    creator = RecordingDatasetCreator()
    sink.initialize(creator)

    assert len(creator.calls) == 1
    name, properties = creator.calls[0]
    assert name == "events"
    assert properties["exploreSchema"] == "id int, name string"
    assert properties["compression"]["output.properties.parquet.compression"] == "GZIP"


def test_initialize_twice_creates_dataset_once(sink: SnapshotParquetSink):
    creator = RecordingDatasetCreator()
    sink.initialize(creator)
    sink.initialize(creator)
    assert len(creator.calls) == 1


def test_transform_after_initialize(sink: SnapshotParquetSink):
    sink.initialize()
    assert sink.transform({"id": 5, "name": "x"}) == {"ID": 5, "Name": "x"}


def test_records_follow_declared_enum_case(order_schema_text: str):
    sink = SnapshotParquetSink(SinkConfig(name="orders", schema=order_schema_text))
    sink.initialize()

    field = sink.record_schema.get_field("status")
    assert field.symbols == ("NEW", "PAID")
    assert sink.configure()["exploreSchema"].startswith("order_id bigint")


def test_configure_returns_a_copy(sink: SnapshotParquetSink):
    first = sink.configure()
    first["name"] = "mutated"
    assert sink.configure()["name"] == "events"


def test_compression_codec_property(sink: SnapshotParquetSink):
    assert sink.compression_codec is CompressionCodec.GZIP


def test_storage_schema(sink: SnapshotParquetSink):
    schema = sink.storage_schema()
    assert schema.names == ["ID", "Name"]
    assert schema.field("ID").type == pa.int32()


@pytest.mark.parametrize(
    "schema_text, codec, error",
    [
        ("{not json", None, SchemaParseError),
        ('{"fields":[{"name":"a","type":"int"}]}', "bzip3", InvalidCodecError),
    ],
)
def test_failed_validation_stays_unconfigured(schema_text, codec, error):
    sink = SnapshotParquetSink(SinkConfig(name="events", schema=schema_text, compression_codec=codec))
    with pytest.raises(error):
        sink.initialize()
    assert sink.state is SinkState.UNCONFIGURED


def test_registry_resolves_plugin():
    assert SinkRegistry.get_sink("SnapshotParquet") is SnapshotParquetSink


@pytest.mark.parametrize("plugin", ["", "SnapshotAvro"])
def test_registry_rejects_unknown_plugin(plugin: str):
    with pytest.raises(ConfigError):
        SinkRegistry.get_sink(plugin)
