import os
from typing import Any, Dict, Mapping, Optional

import yaml

from parquet_sink.pipeline.sink_config import RawSinkConfig, SinkConfig
from parquet_sink.sinks.registry import SinkRegistry
from parquet_sink.utils.exceptions import ConfigError


class ConfigExecutor:
    """
    Configures a sink from a YAML pipeline config.

    Expected shape:

        plugin: SnapshotParquet        # optional
        name: events
        basePath: /data/events         # optional
        schema: ${events.schema}       # text, inline object, or macro
        compressionCodec: snappy       # optional
        arguments:                     # runtime arguments for macros
          events.schema: '{...}'

    Arguments passed to the constructor override those in the file.
    """

    def __init__(self, config_path: str, arguments: Optional[Mapping[str, Any]] = None):
        self.config_path = config_path
        self.arguments = dict(arguments or {})
        self.config = self._load_config()

    # ------------------------------------------
    # Load YAML
    # ------------------------------------------
    def _load_config(self) -> Dict:
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Config file must contain a mapping: {self.config_path}")
        return config

    # ------------------------------------------
    # Resolve
    # ------------------------------------------
    def runtime_arguments(self) -> Dict[str, Any]:
        file_arguments = self.config.get("arguments") or {}
        if not isinstance(file_arguments, dict):
            raise ConfigError("'arguments' must be a mapping")
        return {**file_arguments, **self.arguments}

    def resolve(self) -> SinkConfig:
        raw = RawSinkConfig.from_dict(self.config)
        return raw.resolve(self.runtime_arguments())

    def build_sink(self):
        plugin = self.config.get("plugin", SinkRegistry.DEFAULT_PLUGIN)
        sink_cls = SinkRegistry.get_sink(plugin)
        return sink_cls(self.resolve())

    # ------------------------------------------
    # Execute
    # ------------------------------------------
    def execute(self) -> Dict[str, Any]:
        return self.build_sink().configure()
