import pyarrow as pa

from parquet_sink.canonical.field import CanonicalField
from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.utils.exceptions import UnsupportedTypeError


_ARROW_PRIMITIVE_TYPES = {
    "null": pa.null(),
    "boolean": pa.bool_(),
    "int": pa.int32(),
    "long": pa.int64(),
    "float": pa.float32(),
    "double": pa.float64(),
    "bytes": pa.binary(),
    "string": pa.string(),
    "enum": pa.string(),
}

_ARROW_LOGICAL_TYPES = {
    "date": pa.date32(),
    "time-millis": pa.time32("ms"),
    "time-micros": pa.time64("us"),
    "timestamp-millis": pa.timestamp("ms", tz="UTC"),
    "timestamp-micros": pa.timestamp("us", tz="UTC"),
    "uuid": pa.string(),
}


class ArrowSchemaGenerator:
    """
    Converts CanonicalSchema into the Arrow schema used to write Parquet.

    Mapping:
    - RECORD → struct
    - ARRAY → list (element nullability preserved)
    - MAP → map<string, T>
    - decimal → decimal128(precision, scale)
    - fixed → fixed-size binary
    - multi-type unions → rejected
    """

    def __init__(self, schema: CanonicalSchema):
        self.schema = schema

    def _arrow_type(self, field: CanonicalField, path: str) -> pa.DataType:
        if field.logical_type == "decimal":
            meta = field.numeric_metadata
            return pa.decimal128(meta.precision, meta.scale)

        if field.logical_type in _ARROW_LOGICAL_TYPES:
            return _ARROW_LOGICAL_TYPES[field.logical_type]

        if field.data_type == "record":
            return pa.struct([
                self._arrow_field(child, f"{path}.{child.name}")
                for child in field.children
            ])

        if field.data_type == "array":
            return pa.list_(self._arrow_field(field.items, f"{path}[]"))

        if field.data_type == "map":
            return pa.map_(pa.string(), self._arrow_field(field.values, f"{path}{{}}"))

        if field.data_type == "fixed":
            return pa.binary(field.size)

        if field.data_type in _ARROW_PRIMITIVE_TYPES:
            return _ARROW_PRIMITIVE_TYPES[field.data_type]

        raise UnsupportedTypeError(path, field.data_type, target="Arrow")

    def _arrow_field(self, field: CanonicalField, path: str) -> pa.Field:
        return pa.field(field.name, self._arrow_type(field, path), nullable=field.nullable)

    def generate(self) -> pa.Schema:
        return pa.schema(
            [self._arrow_field(field, field.name) for field in self.schema.fields],
            metadata={"avro.schema": self.schema.text or self.schema.to_json()},
        )


def to_arrow_schema(schema: CanonicalSchema) -> pa.Schema:
    return ArrowSchemaGenerator(schema).generate()
