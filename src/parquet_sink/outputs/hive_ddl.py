from typing import List

from parquet_sink.canonical.field import CanonicalField
from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.pipeline.datatype import map_scalar_to_hive
from parquet_sink.utils.exceptions import UnsupportedTypeError


class HiveDDLGenerator:
    """
    Generates the Hive column list used to register the dataset for explore.

    Output is the bare column-list body (`id int, name string`), one column
    per top-level field in schema order. No enclosing delimiters are added,
    so callers register it as-is.

    Nullability is not encoded: a [null, T] union renders as T.
    """

    def __init__(self, schema: CanonicalSchema):
        self.schema = schema

    def _render_type(self, field: CanonicalField, path: str) -> str:
        """
        Render the Hive type of a field. Handles:
        - SCALAR (incl. decimal / date / timestamp logical types)
        - STRUCT
        - ARRAY<T>
        - MAP<STRING,T>
        """

        if field.data_type == "record":
            members = ",".join(
                f"{child.name}:{self._render_type(child, f'{path}.{child.name}')}"
                for child in field.children
            )
            return f"struct<{members}>"

        if field.data_type == "array":
            return f"array<{self._render_type(field.items, f'{path}[]')}>"

        if field.data_type == "map":
            return f"map<string,{self._render_type(field.values, f'{path}{{}}')}>"

        hive_type = map_scalar_to_hive(field)
        if hive_type is None:
            raise UnsupportedTypeError(path, self._describe(field))
        return hive_type

    @staticmethod
    def _describe(field: CanonicalField) -> str:
        if field.data_type == "union":
            members = ["null"] if field.nullable else []
            members += [b.type_name or b.data_type for b in field.branches]
            return f"union[{', '.join(members)}]"
        return field.data_type

    def render_column(self, field: CanonicalField) -> str:
        return f"{field.name} {self._render_type(field, field.name)}"

    def columns(self) -> List[str]:
        return [self.render_column(field) for field in self.schema.fields]

    def generate(self) -> str:
        return ", ".join(self.columns())


def to_ddl(schema: CanonicalSchema) -> str:
    return HiveDDLGenerator(schema).generate()
