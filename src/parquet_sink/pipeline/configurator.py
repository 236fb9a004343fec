from typing import Any, Dict, Optional

from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.outputs.hive_ddl import to_ddl
from parquet_sink.pipeline.compression import CompressionResolver
from parquet_sink.pipeline.schema_validator import SchemaValidator
from parquet_sink.pipeline.sink_config import SinkConfig
from parquet_sink.observability.logger import log_event, RequestTimer
from parquet_sink.utils.exceptions import ConfigError


# Format selectors understood by the dataset layer
INPUT_FORMAT = "parquet.avro.AvroParquetInputFormat"
OUTPUT_FORMAT = "parquet.avro.AvroParquetOutputFormat"
EXPLORE_FORMAT = "parquet"


class SinkConfigurator:
    """
    Builds the property bag handed to the dataset-creation collaborator.

    Flow:
    Schema validation → Hive DDL → Compression → Property bag

    Performs no I/O. The returned bag is the whole contract with the
    dataset layer.
    """

    def __init__(
        self,
        validator: Optional[SchemaValidator] = None,
        resolver: Optional[CompressionResolver] = None,
    ):
        self.validator = validator or SchemaValidator()
        self.resolver = resolver or CompressionResolver()

    def build_properties(
        self,
        config: SinkConfig,
        schema: Optional[CanonicalSchema] = None,
    ) -> Dict[str, Any]:
        """
        Build dataset properties for `config`.

        `schema` may carry the result of an earlier validation of
        config.schema; it is validated here otherwise.
        """
        timer = RequestTimer()
        log_event("SINK_CONFIGURE_STARTED", {"sink": config.name})

        try:
            if schema is None:
                schema = self.validator.validate(config.schema)
            explore_schema = to_ddl(schema)
            compression = self.resolver.resolve(config.compression_codec, config.schema)
        except ConfigError as e:
            log_event("SINK_CONFIGURE_FAILED", {
                "sink": config.name,
                "error_type": type(e).__name__,
                "message": str(e),
            })
            raise

        properties: Dict[str, Any] = {"name": config.name}
        if config.base_path:
            properties["basePath"] = config.base_path

        properties.update({
            "schema": schema.text,
            "exploreSchema": explore_schema,
            "exploreEnabled": True,
            "exploreFormat": EXPLORE_FORMAT,
            "inputFormat": INPUT_FORMAT,
            "outputFormat": OUTPUT_FORMAT,
            "compressionCodec": compression.codec.value,
            "compression": dict(compression.properties),
        })

        log_event("SINK_CONFIGURE_COMPLETED", {
            "sink": config.name,
            "schema_fingerprint": schema.compute_fingerprint(),
            "columns": len(schema.fields),
            "compression": compression.codec.value,
            "duration_seconds": timer.duration(),
        })
        return properties
