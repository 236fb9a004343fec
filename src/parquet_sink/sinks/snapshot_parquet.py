from typing import Any, Dict, Mapping, Optional

import pyarrow as pa

from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.observability.logger import log_event
from parquet_sink.outputs.arrow_schema import to_arrow_schema
from parquet_sink.pipeline.compression import CompressionCodec
from parquet_sink.pipeline.configurator import SinkConfigurator
from parquet_sink.pipeline.record_transformer import RecordTransformer
from parquet_sink.pipeline.schema_validator import SchemaValidator
from parquet_sink.pipeline.sink_config import SinkConfig
from parquet_sink.sinks.base import DatasetCreator, SinkState
from parquet_sink.utils.exceptions import SinkStateError


class SnapshotParquetSink:
    """
    Sink for a snapshot file set that writes data in Parquet format.

    Lifecycle (forward only):
    UNCONFIGURED → VALIDATED → CONFIGURED → ACTIVE

    A failed validation leaves the sink UNCONFIGURED.
    """

    PLUGIN_NAME = "SnapshotParquet"

    def __init__(self, config: SinkConfig, configurator: Optional[SinkConfigurator] = None):
        self.config = config
        self.configurator = configurator or SinkConfigurator()

        self.state = SinkState.UNCONFIGURED
        self.schema: Optional[CanonicalSchema] = None
        self.record_schema: Optional[CanonicalSchema] = None
        self.properties: Optional[Dict[str, Any]] = None
        self._transformer: Optional[RecordTransformer] = None

    # --------------------------------------------------
    # Configuration
    # --------------------------------------------------

    def validate(self) -> CanonicalSchema:
        """
        Returns the normalized schema. The declared schema, which records
        are built against, is parsed alongside it.
        """
        if self.schema is None:
            schema = self.config.validate()
            self.record_schema = SchemaValidator().parse_declared(self.config.schema)
            self.schema = schema
            self.state = SinkState.VALIDATED
        return self.schema

    def configure(self) -> Dict[str, Any]:
        if self.properties is None:
            schema = self.validate()
            self.properties = self.configurator.build_properties(self.config, schema=schema)
            self.state = SinkState.CONFIGURED
        return dict(self.properties)

    @property
    def compression_codec(self) -> CompressionCodec:
        return CompressionCodec(self.configure()["compressionCodec"])

    def storage_schema(self) -> pa.Schema:
        self.validate()
        return to_arrow_schema(self.record_schema)

    # --------------------------------------------------
    # Runtime
    # --------------------------------------------------

    def initialize(self, dataset_creator: Optional[DatasetCreator] = None) -> None:
        if self.state is SinkState.ACTIVE:
            return

        properties = self.configure()
        self._transformer = RecordTransformer(self.record_schema)

        if dataset_creator is not None:
            dataset_creator.create_dataset(self.config.name, properties)

        self.state = SinkState.ACTIVE
        log_event("SINK_INITIALIZED", {
            "sink": self.config.name,
            "plugin": self.PLUGIN_NAME,
            "dataset_created": dataset_creator is not None,
        })

    def transform(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        if self.state is not SinkState.ACTIVE:
            raise SinkStateError(
                f"Sink '{self.config.name}' is {self.state.value}; "
                f"call initialize() before transforming records"
            )
        return self._transformer.transform(record)
