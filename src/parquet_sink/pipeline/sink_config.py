import json
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.pipeline.compression import CompressionCodec
from parquet_sink.pipeline.schema_validator import SchemaValidator
from parquet_sink.utils.exceptions import ConfigError, InvalidCodecError, MacroResolutionError


MACRO_PATTERN = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class SinkConfig:
    """
    Fully resolved sink configuration. Immutable.
    """
    name: str
    schema: str
    base_path: Optional[str] = None
    compression_codec: Optional[str] = None

    def validate(self) -> CanonicalSchema:
        """
        Configuration-time checks, run before any record flows.
        Returns the validated schema.
        """
        if not self.name or not self.name.strip():
            raise ConfigError("Sink 'name' is required")

        if not self.schema or not self.schema.strip():
            raise ConfigError("Sink 'schema' is required")

        if self.compression_codec and not CompressionCodec.is_valid(self.compression_codec):
            raise InvalidCodecError(self.compression_codec, [c.value for c in CompressionCodec])

        return SchemaValidator().validate(self.schema)


@dataclass(frozen=True)
class RawSinkConfig:
    """
    Sink configuration as written by the pipeline author.

    Any field may still hold a ${macro} placeholder (typically the schema,
    supplied at runtime). Placeholders are substituted exactly once, by
    resolve(), before validation.
    """
    name: Optional[str] = None
    schema: Optional[str] = None
    base_path: Optional[str] = None
    compression_codec: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawSinkConfig":
        schema = data.get("schema")
        # Schema written inline as a YAML / JSON object
        if isinstance(schema, (dict, list)):
            schema = json.dumps(schema)

        return cls(
            name=data.get("name"),
            schema=schema,
            base_path=data.get("basePath"),
            compression_codec=data.get("compressionCodec"),
        )

    def _substitute(self, field_name: str, value: Optional[Any], context: Mapping[str, Any]) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ConfigError(f"Sink '{field_name}' must be a string, got {type(value).__name__}")

        def _replace(match):
            key = match.group(1)
            if key not in context:
                raise MacroResolutionError(key, field_name)
            return str(context[key])

        return MACRO_PATTERN.sub(_replace, value)

    def resolve(self, context: Optional[Mapping[str, Any]] = None) -> SinkConfig:
        context = context or {}

        name = self._substitute("name", self.name, context)
        schema = self._substitute("schema", self.schema, context)
        if not name:
            raise ConfigError("Sink 'name' is required")
        if not schema:
            raise ConfigError("Sink 'schema' is required")

        return SinkConfig(
            name=name,
            schema=schema,
            base_path=self._substitute("basePath", self.base_path, context) or None,
            compression_codec=self._substitute("compressionCodec", self.compression_codec, context) or None,
        )
