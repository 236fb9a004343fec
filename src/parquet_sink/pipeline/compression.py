from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from parquet_sink.utils.exceptions import InvalidCodecError


# FileSet output properties are forwarded to the Parquet output format
OUTPUT_PROPERTIES_PREFIX = "output.properties."
PARQUET_COMPRESSION = "parquet.compression"
PARQUET_AVRO_SCHEMA = "parquet.avro.schema"


class CompressionCodec(Enum):
    NONE = "none"
    SNAPPY = "snappy"
    GZIP = "gzip"
    LZO = "lzo"
    BROTLI = "brotli"
    LZ4 = "lz4"
    ZSTD = "zstd"

    @classmethod
    def is_valid(cls, name: str) -> bool:
        return name in {c.value for c in cls}

    @property
    def parquet_name(self) -> str:
        """Codec name as the Parquet writer spells it."""
        if self is CompressionCodec.NONE:
            return "UNCOMPRESSED"
        return self.value.upper()


@dataclass(frozen=True)
class CompressionProperties:
    codec: CompressionCodec
    properties: Dict[str, str] = field(default_factory=dict)


class CompressionResolver:
    """
    Maps a codec name to the dataset compression properties.

    Lookup is case-sensitive against the CompressionCodec values.
    An absent (None or empty) codec resolves to NONE.
    """

    def resolve(self, codec_name: Optional[str], schema_text: str) -> CompressionProperties:
        if codec_name is None or codec_name == "":
            codec = CompressionCodec.NONE
        elif CompressionCodec.is_valid(codec_name):
            codec = CompressionCodec(codec_name)
        else:
            raise InvalidCodecError(codec_name, [c.value for c in CompressionCodec])

        properties = {OUTPUT_PROPERTIES_PREFIX + PARQUET_AVRO_SCHEMA: schema_text}
        if codec is not CompressionCodec.NONE:
            properties[OUTPUT_PROPERTIES_PREFIX + PARQUET_COMPRESSION] = codec.parquet_name

        return CompressionProperties(codec=codec, properties=properties)
