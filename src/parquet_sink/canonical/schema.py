from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple
import hashlib
import json

from parquet_sink.canonical.field import CanonicalField


@dataclass(frozen=True)
class CanonicalSchema:
    """
    Validated sink schema: a named, ordered record of fields.

    `text` holds the canonical (lower-cased) schema text the schema was
    parsed from. It does not take part in equality, so a schema validated
    from its own re-serialization compares equal to the original.
    """
    name: str
    fields: Tuple[CanonicalField, ...]

    namespace: Optional[str] = None
    doc: Optional[str] = None
    text: str = field(default="", compare=False)

    @property
    def full_name(self) -> str:
        if self.namespace and "." not in self.name:
            return f"{self.namespace}.{self.name}"
        return self.name

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[CanonicalField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    # --------------------------------------------------
    # Re-serialization
    # --------------------------------------------------

    def to_avro(self) -> Dict[str, Any]:
        """
        Return the schema as an Avro JSON object.
        Named types are defined once and referenced by name afterwards.
        """
        emitted: Set[str] = {self.full_name}
        record: Dict[str, Any] = {"type": "record", "name": self.name}
        if self.namespace:
            record["namespace"] = self.namespace
        if self.doc:
            record["doc"] = self.doc
        record["fields"] = [_field_to_avro(f, emitted) for f in self.fields]
        return record

    def to_json(self) -> str:
        return json.dumps(self.to_avro())

    def compute_fingerprint(self) -> str:
        """
        Deterministic hash of the schema structure.
        """
        serialized = json.dumps(self.to_avro(), sort_keys=True)
        return hashlib.sha256(serialized.encode()).hexdigest()


def _field_to_avro(f: CanonicalField, emitted: Set[str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {"name": f.name, "type": _type_to_avro(f, emitted)}
    if f.doc:
        out["doc"] = f.doc
    return out


def _type_to_avro(f: CanonicalField, emitted: Set[str]) -> Any:
    if f.data_type == "null":
        return "null"

    if f.data_type == "union":
        members = [_bare_type_to_avro(b, emitted) for b in f.branches]
        return ["null"] + members if f.nullable else members

    bare = _bare_type_to_avro(f, emitted)
    return ["null", bare] if f.nullable else bare


def _bare_type_to_avro(f: CanonicalField, emitted: Set[str]) -> Any:
    # Named types: define once, reference afterwards
    if f.type_name:
        if f.type_name in emitted:
            return f.type_name
        emitted.add(f.type_name)

    if f.data_type == "record":
        return {
            "type": "record",
            "name": f.type_name,
            "fields": [_field_to_avro(c, emitted) for c in f.children],
        }

    if f.data_type == "enum":
        return {"type": "enum", "name": f.type_name, "symbols": list(f.symbols)}

    if f.data_type == "array":
        return {"type": "array", "items": _type_to_avro(f.items, emitted)}

    if f.data_type == "map":
        return {"type": "map", "values": _type_to_avro(f.values, emitted)}

    if f.data_type == "fixed":
        out: Dict[str, Any] = {"type": "fixed", "name": f.type_name, "size": f.size}
    elif f.logical_type:
        out = {"type": f.data_type}
    else:
        return f.data_type

    if f.logical_type:
        out["logicalType"] = f.logical_type
        if f.numeric_metadata:
            out["precision"] = f.numeric_metadata.precision
            out["scale"] = f.numeric_metadata.scale
    return out
