from typing import Optional
from parquet_sink.canonical.field import CanonicalField

# Avro primitive -> Hive scalar
_HIVE_SCALAR_TYPES = {
    "boolean": "boolean",
    "int": "int",
    "long": "bigint",
    "float": "float",
    "double": "double",
    "bytes": "binary",
    "string": "string",
    "enum": "string",
}

# Logical types with a dedicated Hive type. Other logical
# types fall back to their underlying Avro type.
_HIVE_LOGICAL_TYPES = {
    "date": "date",
    "timestamp-millis": "timestamp",
    "timestamp-micros": "timestamp",
}


def map_scalar_to_hive(field: CanonicalField) -> Optional[str]:
    """
    Map a non-nested CanonicalField to its Hive type token.
    Returns None when the type has no Hive equivalent.
    """

    if field.logical_type == "decimal":
        meta = field.numeric_metadata
        return f"decimal({meta.precision},{meta.scale})"

    if field.logical_type in _HIVE_LOGICAL_TYPES:
        return _HIVE_LOGICAL_TYPES[field.logical_type]

    return _HIVE_SCALAR_TYPES.get(field.data_type)
