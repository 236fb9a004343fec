import datetime
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Tuple

from parquet_sink.canonical.field import CanonicalField
from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.utils.exceptions import TransformError


INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1
LONG_MIN, LONG_MAX = -(2 ** 63), 2 ** 63 - 1

# Widening: int/long values are accepted for float/double
_FLOAT_TARGETS = {"float", "double"}


def _lookup(record: Mapping[str, Any], name: str) -> Tuple[bool, Any]:
    """
    Find a field in an input record. Exact match first, then
    case-insensitive.
    """
    if name in record:
        return True, record[name]
    folded = name.lower()
    for key, value in record.items():
        if isinstance(key, str) and key.lower() == folded:
            return True, value
    return False, None


def _is_integral(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class RecordTransformer:
    """
    Converts structured input records into Avro generic records (dicts in
    schema field order, as fastavro reads and writes them).

    Holds only the read-only schema; every call is independent.
    """

    def __init__(self, schema: CanonicalSchema):
        self.schema = schema

    def transform(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(record, Mapping):
            raise TransformError(
                "<record>",
                f"expected a mapping, got {type(record).__name__}",
                record,
            )
        return self._convert_record(self.schema.fields, record, "", record)

    # ==================================================
    # RECORDS
    # ==================================================

    def _convert_record(self, fields, record: Mapping, path: str, context: Mapping) -> Dict[str, Any]:
        out: Dict[str, Any] = {}

        for field in fields:
            field_path = f"{path}.{field.name}" if path else field.name
            present, value = _lookup(record, field.name)

            if value is None:
                if field.nullable:
                    out[field.name] = None
                    continue
                reason = "required field is null" if present else "required field is missing"
                raise TransformError(field_path, reason, context)

            out[field.name] = self._convert_value(field, value, field_path, context)

        return out

    # ==================================================
    # VALUES
    # ==================================================

    def _convert_value(self, field: CanonicalField, value: Any, path: str, context: Mapping) -> Any:
        if value is None:
            if field.nullable:
                return None
            raise TransformError(path, "value is null but type is not nullable", context)

        if field.logical_type:
            return self._convert_logical(field, value, path, context)

        data_type = field.data_type

        if data_type == "record":
            if not isinstance(value, Mapping):
                raise self._mismatch(path, "record", value, context)
            return self._convert_record(field.children, value, path, context)

        if data_type == "array":
            if not isinstance(value, (list, tuple)):
                raise self._mismatch(path, "array", value, context)
            return [
                self._convert_value(field.items, item, f"{path}[{idx}]", context)
                for idx, item in enumerate(value)
            ]

        if data_type == "map":
            if not isinstance(value, Mapping):
                raise self._mismatch(path, "map", value, context)
            out = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise TransformError(path, f"map key {key!r} is not a string", context)
                out[key] = self._convert_value(field.values, item, f"{path}[{key!r}]", context)
            return out

        if data_type == "union":
            for branch in field.branches:
                try:
                    return self._convert_value(branch, value, path, context)
                except TransformError:
                    continue
            raise self._mismatch(path, "union", value, context)

        return self._convert_primitive(field, value, path, context)

    def _convert_primitive(self, field: CanonicalField, value: Any, path: str, context: Mapping) -> Any:
        data_type = field.data_type

        if data_type == "boolean":
            if isinstance(value, bool):
                return value
            raise self._mismatch(path, data_type, value, context)

        if data_type in ("int", "long"):
            if not _is_integral(value):
                raise self._mismatch(path, data_type, value, context)
            low, high = (INT_MIN, INT_MAX) if data_type == "int" else (LONG_MIN, LONG_MAX)
            if not low <= value <= high:
                raise TransformError(path, f"value {value} out of range for {data_type}", context)
            return value

        if data_type in _FLOAT_TARGETS:
            if _is_integral(value) or isinstance(value, float):
                return float(value)
            raise self._mismatch(path, data_type, value, context)

        if data_type == "string":
            if isinstance(value, str):
                return value
            raise self._mismatch(path, data_type, value, context)

        if data_type in ("bytes", "fixed"):
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise self._mismatch(path, data_type, value, context)
            value = bytes(value)
            if data_type == "fixed" and len(value) != field.size:
                raise TransformError(
                    path, f"expected {field.size} bytes for fixed, got {len(value)}", context
                )
            return value

        if data_type == "enum":
            if isinstance(value, str) and value in field.symbols:
                return value
            raise TransformError(
                path, f"{value!r} is not one of the enum symbols {list(field.symbols)}", context
            )

        raise self._mismatch(path, data_type, value, context)

    def _convert_logical(self, field: CanonicalField, value: Any, path: str, context: Mapping) -> Any:
        logical_type = field.logical_type

        if logical_type == "decimal":
            return self._convert_decimal(field, value, path, context)

        if logical_type == "date":
            if isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
                return value
            raise self._mismatch(path, "date", value, context)

        if logical_type in ("timestamp-millis", "timestamp-micros"):
            if isinstance(value, datetime.datetime):
                return value
            raise self._mismatch(path, logical_type, value, context)

        if logical_type in ("time-millis", "time-micros"):
            if isinstance(value, datetime.time):
                return value
            raise self._mismatch(path, logical_type, value, context)

        if logical_type == "uuid":
            if isinstance(value, uuid.UUID):
                return str(value)
            if isinstance(value, str):
                try:
                    return str(uuid.UUID(value))
                except ValueError:
                    raise TransformError(path, f"{value!r} is not a valid uuid", context)
            raise self._mismatch(path, "uuid", value, context)

        return self._convert_primitive(field, value, path, context)

    def _convert_decimal(self, field: CanonicalField, value: Any, path: str, context: Mapping) -> Decimal:
        meta = field.numeric_metadata

        if isinstance(value, Decimal):
            number = value
        elif _is_integral(value) or isinstance(value, str):
            try:
                number = Decimal(value)
            except InvalidOperation:
                raise TransformError(path, f"{value!r} is not a valid decimal", context)
        else:
            raise self._mismatch(path, "decimal", value, context)

        if not number.is_finite():
            raise TransformError(path, f"{value!r} is not a finite decimal", context)

        sign, digits, exponent = number.as_tuple()
        scale = max(-exponent, 0)
        integer_digits = max(len(digits) + exponent, 0)
        if scale > meta.scale:
            raise TransformError(
                path, f"{value!r} has scale {scale}, more than declared scale {meta.scale}", context
            )
        if integer_digits > meta.max_integer_digits:
            raise TransformError(
                path, f"{value!r} does not fit decimal({meta.precision},{meta.scale})", context
            )
        return number

    @staticmethod
    def _mismatch(path: str, expected: str, value: Any, context: Mapping) -> TransformError:
        return TransformError(
            path,
            f"expected {expected}, got {type(value).__name__} ({value!r})",
            context,
        )
