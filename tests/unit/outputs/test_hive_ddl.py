from __future__ import annotations

import pytest

from parquet_sink.outputs.hive_ddl import HiveDDLGenerator, to_ddl
from parquet_sink.pipeline.schema_validator import SchemaValidator
from parquet_sink.utils.exceptions import UnsupportedTypeError


def _schema(text: str):
    return SchemaValidator().validate(text)


def test_scenario_ddl_body(scenario_schema_text: str):
    assert to_ddl(_schema(scenario_schema_text)) == "id int, name string"


def test_ddl_has_no_enclosing_delimiters(scenario_schema_text: str):
    ddl = to_ddl(_schema(scenario_schema_text))
    assert not ddl.startswith("(")
    assert not ddl.endswith(")")


def test_nested_schema_ddl(order_schema_text: str):
    expected = (
        "order_id bigint, "
        "customer struct<id:int,email:string>, "
        "tags array<string>, "
        "attributes map<string,double>, "
        "status string, "
        "amount decimal(10,2), "
        "order_date date, "
        "created_at timestamp, "
        "billing struct<id:int,email:string>, "
        "payload binary, "
        "active boolean, "
        "score float"
    )
    assert to_ddl(_schema(order_schema_text)) == expected


def test_one_column_per_top_level_field_in_order(order_schema_text: str):
    schema = _schema(order_schema_text)
    columns = HiveDDLGenerator(schema).columns()

    assert len(columns) == len(schema.fields)
    assert [c.split(" ", 1)[0] for c in columns] == schema.field_names()


def test_ddl_is_deterministic(order_schema_text: str):
    schema = _schema(order_schema_text)
    assert to_ddl(schema) == to_ddl(_schema(order_schema_text))


@pytest.mark.parametrize(
    "avro_type, hive_type",
    [
        ("boolean", "boolean"),
        ("int", "int"),
        ("long", "bigint"),
        ("float", "float"),
        ("double", "double"),
        ("bytes", "binary"),
        ("string", "string"),
        (["null", "long"], "bigint"),
        ({"type": "array", "items": ["null", "int"]}, "array<int>"),
        ({"type": "map", "values": {"type": "array", "items": "string"}}, "map<string,array<string>>"),
        ({"type": "long", "logicalType": "timestamp-micros"}, "timestamp"),
        ({"type": "int", "logicalType": "time-millis"}, "int"),
        ({"type": "string", "logicalType": "uuid"}, "string"),
        (
            {"type": "fixed", "name": "Money", "size": 8, "logicalType": "decimal", "precision": 18, "scale": 4},
            "decimal(18,4)",
        ),
    ],
)
def test_type_mapping(make_schema_text, avro_type, hive_type: str):
    text = make_schema_text([{"name": "col", "type": avro_type}])
    assert to_ddl(_schema(text)) == f"col {hive_type}"


def test_fixed_type_is_unsupported(make_schema_text):
    text = make_schema_text([
        {"name": "id", "type": "int"},
        {"name": "checksum", "type": {"type": "fixed", "name": "Md5", "size": 16}},
    ])
    with pytest.raises(UnsupportedTypeError) as exc:
        to_ddl(_schema(text))

    assert exc.value.field_name == "checksum"
    assert "checksum" in str(exc.value)


def test_multi_type_union_is_unsupported(make_schema_text):
    text = make_schema_text([{"name": "value", "type": ["null", "int", "string"]}])
    with pytest.raises(UnsupportedTypeError) as exc:
        to_ddl(_schema(text))

    assert exc.value.field_name == "value"
    assert exc.value.type_name == "union[null, int, string]"


def test_null_type_is_unsupported(make_schema_text):
    text = make_schema_text([{"name": "nothing", "type": "null"}])
    with pytest.raises(UnsupportedTypeError, match="nothing"):
        to_ddl(_schema(text))


def test_unsupported_nested_type_names_its_path(make_schema_text):
    text = make_schema_text([
        {
            "name": "blobs",
            "type": {"type": "array", "items": {"type": "fixed", "name": "Block", "size": 4}},
        }
    ])
    with pytest.raises(UnsupportedTypeError) as exc:
        to_ddl(_schema(text))

    assert exc.value.field_name == "blobs[]"
