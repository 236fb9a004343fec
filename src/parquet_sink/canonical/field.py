from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class NumericMetadata:
    """
    Precision / scale of a decimal logical type.
    """
    precision: int              # total digits
    scale: int                  # digits after decimal
    max_integer_digits: int     # precision - scale
    signed: bool = True


@dataclass(frozen=True)
class CanonicalField:
    """
    Canonical representation of one Avro field (or nested element).
    Immutable once built by the schema adapter.
    """
    name: str
    data_type: str              # string, int, long, float, double, boolean, bytes,
                                # enum, fixed, null, record, array, map, union
    nullable: bool = False

    doc: Optional[str] = None
    type_name: Optional[str] = None         # full name of record / enum / fixed

    children: Tuple["CanonicalField", ...] = ()     # record fields
    items: Optional["CanonicalField"] = None        # array element
    values: Optional["CanonicalField"] = None       # map value
    branches: Tuple["CanonicalField", ...] = ()     # non-null union members

    symbols: Tuple[str, ...] = ()
    size: Optional[int] = None

    logical_type: Optional[str] = None
    numeric_metadata: Optional[NumericMetadata] = None

    @property
    def is_record(self) -> bool:
        return self.data_type == "record"

    def child(self, name: str) -> Optional["CanonicalField"]:
        for c in self.children:
            if c.name == name:
                return c
        return None
