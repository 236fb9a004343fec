from parquet_sink.sinks.snapshot_parquet import SnapshotParquetSink
from parquet_sink.utils.exceptions import ConfigError


class SinkRegistry:
    """
    Maps sink plugin names to sink implementations.
    """

    _REGISTRY = {
        SnapshotParquetSink.PLUGIN_NAME: SnapshotParquetSink,
    }

    DEFAULT_PLUGIN = SnapshotParquetSink.PLUGIN_NAME

    @classmethod
    def get_sink(cls, plugin_name: str):
        if not plugin_name:
            raise ConfigError("Sink plugin name must not be empty")

        if plugin_name not in cls._REGISTRY:
            raise ConfigError(
                f"No sink registered for plugin: {plugin_name}. "
                f"Available: {sorted(cls._REGISTRY)}"
            )

        return cls._REGISTRY[plugin_name]
