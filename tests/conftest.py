# tests/conftest.py
from __future__ import annotations

import json
from pathlib import Path

import pytest


SCENARIO_SCHEMA = (
    '{"fields":[{"name":"ID","type":"int"},'
    '{"name":"Name","type":["string","null"]}]}'
)


@pytest.fixture()
def scenario_schema_text() -> str:
    """Two-column schema with mixed-case names and a nullable string."""
    return SCENARIO_SCHEMA


@pytest.fixture()
def order_schema() -> dict:
    """Nested schema touching every supported type family."""
    return {
        "type": "record",
        "name": "Order",
        "namespace": "com.Shop",
        "fields": [
            {"name": "order_id", "type": "long"},
            {
                "name": "customer",
                "type": {
                    "type": "record",
                    "name": "Customer",
                    "fields": [
                        {"name": "id", "type": "int"},
                        {"name": "email", "type": ["null", "string"]},
                    ],
                },
            },
            {"name": "tags", "type": {"type": "array", "items": "string"}},
            {"name": "attributes", "type": {"type": "map", "values": "double"}},
            {
                "name": "status",
                "type": {"type": "enum", "name": "Status", "symbols": ["NEW", "PAID"]},
            },
            {
                "name": "amount",
                "type": {"type": "bytes", "logicalType": "decimal", "precision": 10, "scale": 2},
            },
            {"name": "order_date", "type": {"type": "int", "logicalType": "date"}},
            {
                "name": "created_at",
                "type": ["null", {"type": "long", "logicalType": "timestamp-millis"}],
            },
            {"name": "billing", "type": ["null", "Customer"]},
            {"name": "payload", "type": "bytes"},
            {"name": "active", "type": "boolean"},
            {"name": "score", "type": "float"},
        ],
    }


@pytest.fixture()
def order_schema_text(order_schema: dict) -> str:
    return json.dumps(order_schema)


@pytest.fixture()
def make_schema_text():
    """Build schema text for a single-record schema from a list of fields."""

    def _make(fields: list, name: str = "Rec") -> str:
        return json.dumps({"type": "record", "name": name, "fields": fields})

    return _make


@pytest.fixture()
def sandbox(tmp_path: Path) -> Path:
    """Per-test filesystem sandbox."""
    return tmp_path
