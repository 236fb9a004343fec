from fastavro import parse_schema

from parquet_sink.adapters.avro_adapter import AvroSchemaAdapter
from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.utils.exceptions import SchemaParseError


class SchemaValidator:
    """
    Parses and syntax-checks the sink schema.

    This class:
    - Lower-cases the schema text for validation and the explore DDL
    - Parses the declared (as written) text for records and storage
    - Builds a fresh adapter / fastavro name registry per call

    Enum symbols are data, so only the declared schema can check record
    values against them.
    """

    def normalize(self, schema_text: str) -> str:
        if not isinstance(schema_text, str) or not schema_text.strip():
            raise SchemaParseError("Schema must be a non-empty string")
        return schema_text.lower()

    def validate(self, schema_text: str) -> CanonicalSchema:
        return self._parse(self.normalize(schema_text))

    def parse_declared(self, schema_text: str) -> CanonicalSchema:
        """
        Parse the schema with the case the author declared. Records
        produced against it match the `parquet.avro.schema` property.
        """
        self.normalize(schema_text)
        return self._parse(schema_text)

    def _parse(self, text: str) -> CanonicalSchema:
        adapter = AvroSchemaAdapter(text)
        raw = adapter.load()
        schema = adapter.parse(raw)

        # Full Avro rules (name syntax, defaults, ...) on top of our structure checks
        try:
            parse_schema(raw, named_schemas={})
        except Exception as e:
            raise SchemaParseError(f"Unable to parse schema: {e}") from e

        return schema
