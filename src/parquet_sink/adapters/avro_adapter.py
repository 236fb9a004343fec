import json
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set, Tuple

from parquet_sink.canonical.field import CanonicalField, NumericMetadata
from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.utils.exceptions import SchemaParseError


DEFAULT_RECORD_NAME = "etlschemabody"

PRIMITIVE_TYPES = {
    "null",
    "boolean",
    "int",
    "long",
    "float",
    "double",
    "bytes",
    "string",
}

# logical type -> underlying Avro types it may annotate
_LOGICAL_TYPES = {
    "decimal": {"bytes", "fixed"},
    "date": {"int"},
    "time-millis": {"int"},
    "time-micros": {"long"},
    "timestamp-millis": {"long"},
    "timestamp-micros": {"long"},
    "uuid": {"string"},
}


def _reject_json_duplicates(pairs):
    result = {}
    for key, value in pairs:
        if key in result:
            raise SchemaParseError(f"Duplicate JSON key in schema: '{key}'")
        result[key] = value
    return result

def _reject_nonstandard_constant(value: str):
    raise SchemaParseError(f"Invalid JSON constant in schema: {value}")


class AvroSchemaAdapter:
    """
    Adapter to convert Avro schema JSON text into CanonicalSchema.

    Responsibilities:
    - Load schema JSON (strict: no duplicate keys, no NaN constants)
    - Resolve named type references
    - Handle union nullability
    - Handle logical types (decimal, date, time, timestamp, uuid)

    DOES NOT:
    - Normalize case (SchemaValidator does, before parsing)
    - Decide DDL / storage support (translators do)

    One adapter parses one schema; named types never leak between calls.
    """

    def __init__(self, schema_text: str):
        self.schema_text = schema_text
        self._named_types: Dict[str, CanonicalField] = {}
        self._recursion_stack: Set[str] = set()

    # ==================================================
    # JSON LOADING
    # ==================================================

    def load(self) -> Any:
        try:
            raw = json.loads(
                self.schema_text,
                object_pairs_hook=_reject_json_duplicates,
                parse_constant=_reject_nonstandard_constant,
            )
        except json.JSONDecodeError as e:
            raise SchemaParseError(f"Schema is not valid JSON: {e}") from e

        # Shorthand {"fields": [...]} is an anonymous top-level record
        if isinstance(raw, dict) and "type" not in raw and "fields" in raw:
            raw = {"type": "record", "name": DEFAULT_RECORD_NAME, **raw}
        return raw

    # ==================================================
    # ENTRYPOINT
    # ==================================================

    def parse(self, raw: Any = None) -> CanonicalSchema:
        if raw is None:
            raw = self.load()

        if not isinstance(raw, dict) or raw.get("type") != "record":
            raise SchemaParseError("Top-level schema must be an Avro record")

        root = self._parse_avro_type(name=raw.get("name"), avro_type=raw, path="", namespace=None)

        if not root.children:
            raise SchemaParseError("Schema must declare at least one field")

        namespace = raw.get("namespace")
        return CanonicalSchema(
            name=raw["name"],
            fields=root.children,
            namespace=namespace if isinstance(namespace, str) and namespace else None,
            doc=raw.get("doc"),
            text=self.schema_text,
        )

    # ==================================================
    # NAMED TYPES
    # ==================================================

    @staticmethod
    def _full_name(name: str, namespace: Optional[str]) -> str:
        if "." in name or not namespace:
            return name
        return f"{namespace}.{name}"

    def _register(self, full_name: str, definition: CanonicalField, path: str):
        if full_name in self._named_types:
            raise SchemaParseError(
                f"Named type '{full_name}' redefined at '{path or '<root>'}'"
            )
        self._named_types[full_name] = definition

    def _resolve_named(self, reference: str, namespace: Optional[str], path: str) -> CanonicalField:
        candidates = [self._full_name(reference, namespace), reference]
        for candidate in candidates:
            if candidate in self._recursion_stack:
                raise SchemaParseError(
                    f"Recursive schema detected for record '{candidate}' at '{path}'"
                )
            if candidate in self._named_types:
                return self._named_types[candidate]

        raise SchemaParseError(f"Unknown type '{reference}' for field '{path}'")

    # ==================================================
    # RECURSIVE TYPE PARSING
    # ==================================================

    def _parse_fields(self, raw_fields: Any, path: str, namespace: Optional[str]) -> Tuple[CanonicalField, ...]:
        if not isinstance(raw_fields, list):
            raise SchemaParseError(f"Record '{path or '<root>'}' must declare a 'fields' list")

        seen: Set[str] = set()
        fields: List[CanonicalField] = []

        for idx, raw_field in enumerate(raw_fields, start=1):
            if not isinstance(raw_field, dict):
                raise SchemaParseError(f"Field #{idx} of '{path or '<root>'}' must be an object")

            name = raw_field.get("name")
            if not isinstance(name, str) or not name.strip():
                raise SchemaParseError(f"Field #{idx} of '{path or '<root>'}' has no name")
            if "type" not in raw_field:
                raise SchemaParseError(f"Field '{name}' has no type")

            if name in seen:
                raise SchemaParseError(
                    f"Duplicate field name '{name}' in record '{path or '<root>'}'"
                )
            seen.add(name)

            child_path = f"{path}.{name}" if path else name
            fields.append(
                self._parse_avro_type(
                    name=name,
                    avro_type=raw_field["type"],
                    path=child_path,
                    namespace=namespace,
                    doc=raw_field.get("doc"),
                )
            )

        return tuple(fields)

    def _parse_avro_type(
        self,
        name: str,
        avro_type: Any,
        path: str,
        namespace: Optional[str],
        doc: Optional[str] = None,
    ) -> CanonicalField:

        # Union type
        if isinstance(avro_type, list):
            if not avro_type:
                raise SchemaParseError(f"Empty union for field '{path}'")

            non_null_types = [t for t in avro_type if t != "null"]
            nullable = len(non_null_types) < len(avro_type)

            if not non_null_types:
                return CanonicalField(name=name, data_type="null", nullable=True, doc=doc)

            # Single non-null type → nullable wrapper
            if len(non_null_types) == 1:
                inner = self._parse_avro_type(name, non_null_types[0], path, namespace, doc)
                return replace(inner, nullable=nullable)

            branches = tuple(
                self._parse_avro_type(name, t, path, namespace)
                for t in non_null_types
            )
            return CanonicalField(
                name=name,
                data_type="union",
                nullable=nullable,
                doc=doc,
                branches=branches,
            )

        # Primitive name or named type reference
        if isinstance(avro_type, str):
            if avro_type in PRIMITIVE_TYPES:
                return CanonicalField(
                    name=name,
                    data_type=avro_type,
                    nullable=avro_type == "null",
                    doc=doc,
                )

            named = self._resolve_named(avro_type, namespace, path)
            return replace(named, name=name, doc=doc, nullable=False)

        if not isinstance(avro_type, dict):
            raise SchemaParseError(f"Invalid type declaration for field '{path}': {avro_type!r}")

        type_name = avro_type.get("type")

        # {"type": {...}} / {"type": [...]} wrappers
        if isinstance(type_name, (dict, list)):
            return self._parse_avro_type(name, type_name, path, namespace, doc)

        # RECORD (nested)
        if type_name == "record":
            record_name, full_name, record_ns = self._named_header(avro_type, path, namespace)

            self._recursion_stack.add(full_name)
            try:
                children = self._parse_fields(avro_type.get("fields"), path, record_ns)
            finally:
                self._recursion_stack.discard(full_name)

            definition = CanonicalField(
                name=name,
                data_type="record",
                doc=doc,
                type_name=full_name,
                children=children,
            )
            self._register(full_name, definition, path)
            return definition

        # ARRAY
        if type_name == "array":
            if "items" not in avro_type:
                raise SchemaParseError(f"Array field '{path}' has no 'items'")
            element = self._parse_avro_type("element", avro_type["items"], f"{path}[]", namespace)
            return CanonicalField(name=name, data_type="array", doc=doc, items=element)

        # MAP
        if type_name == "map":
            if "values" not in avro_type:
                raise SchemaParseError(f"Map field '{path}' has no 'values'")
            value = self._parse_avro_type("value", avro_type["values"], f"{path}{{}}", namespace)
            return CanonicalField(name=name, data_type="map", doc=doc, values=value)

        # ENUM
        if type_name == "enum":
            _, full_name, _ = self._named_header(avro_type, path, namespace)
            symbols = avro_type.get("symbols")
            if not isinstance(symbols, list) or not symbols or not all(isinstance(s, str) for s in symbols):
                raise SchemaParseError(f"Enum field '{path}' must declare a list of string symbols")
            if len(set(symbols)) != len(symbols):
                raise SchemaParseError(f"Enum field '{path}' declares duplicate symbols")

            definition = CanonicalField(
                name=name,
                data_type="enum",
                doc=doc,
                type_name=full_name,
                symbols=tuple(symbols),
            )
            self._register(full_name, definition, path)
            return definition

        # FIXED
        if type_name == "fixed":
            _, full_name, _ = self._named_header(avro_type, path, namespace)
            size = avro_type.get("size")
            if not isinstance(size, int) or isinstance(size, bool) or size < 0:
                raise SchemaParseError(f"Fixed field '{path}' must declare a non-negative 'size'")

            definition = self._with_logical_type(
                CanonicalField(name=name, data_type="fixed", doc=doc, type_name=full_name, size=size),
                avro_type,
                path,
            )
            self._register(full_name, definition, path)
            return definition

        # Annotated primitive: {"type": "long", "logicalType": ...}
        if type_name in PRIMITIVE_TYPES:
            base = CanonicalField(name=name, data_type=type_name, nullable=type_name == "null", doc=doc)
            return self._with_logical_type(base, avro_type, path)

        if isinstance(type_name, str):
            named = self._resolve_named(type_name, namespace, path)
            return replace(named, name=name, doc=doc, nullable=False)

        raise SchemaParseError(f"Invalid type declaration for field '{path}': {avro_type!r}")

    def _named_header(self, avro_type: Dict, path: str, namespace: Optional[str]):
        type_name = avro_type.get("name")
        if not isinstance(type_name, str) or not type_name.strip():
            raise SchemaParseError(f"Named type at '{path or '<root>'}' has no name")

        own_ns = avro_type.get("namespace")
        effective_ns = own_ns if isinstance(own_ns, str) and own_ns else namespace
        full_name = self._full_name(type_name, effective_ns)

        # Nested types inherit the namespace of their enclosing full name
        child_ns = full_name.rsplit(".", 1)[0] if "." in full_name else effective_ns
        return type_name, full_name, child_ns

    def _with_logical_type(self, base: CanonicalField, avro_type: Dict, path: str) -> CanonicalField:
        # Case normalization lower-cases the "logicalType" key
        logical_type = avro_type.get("logicaltype", avro_type.get("logicalType"))

        # Unknown or mismatched logical types are ignored, as Avro readers do
        if logical_type not in _LOGICAL_TYPES or base.data_type not in _LOGICAL_TYPES[logical_type]:
            return base

        if logical_type != "decimal":
            return replace(base, logical_type=logical_type)

        precision = avro_type.get("precision")
        scale = avro_type.get("scale", 0)
        if not isinstance(precision, int) or isinstance(precision, bool) or precision <= 0:
            raise SchemaParseError(f"Decimal field '{path}' must declare a positive 'precision'")
        if not isinstance(scale, int) or isinstance(scale, bool) or scale < 0 or scale > precision:
            raise SchemaParseError(
                f"Decimal field '{path}': scale ({scale}) must be between 0 and precision ({precision})"
            )

        return replace(
            base,
            logical_type="decimal",
            numeric_metadata=NumericMetadata(
                precision=precision,
                scale=scale,
                max_integer_digits=precision - scale,
                signed=True,
            ),
        )
