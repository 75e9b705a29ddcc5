"""Turn a schema definition into one representative value.

The generated value is minimal rather than realistic: objects only carry the
properties that are required or that declare their own example, so the result
is as likely as possible to be accepted by the server.
"""

import copy
from typing import Any

MAX_DEPTH = 16

FORMAT_EXAMPLES = {
    "date": "2024-01-01",
    "date-time": "2024-01-01T00:00:00Z",
    "email": "test@example.com",
    "uuid": "550e8400-e29b-41d4-a716-446655440000",
    "uri": "https://example.com",
}


def synthesize(schema: dict | None, depth: int = 0) -> Any:
    """Return an example value for `schema`, or None for unknown kinds.

    Precedence: explicit example, default, first enum value, then a value
    derived from the schema type. Beyond MAX_DEPTH nesting levels None is
    returned, which stops cyclic schema graphs.
    """
    if not isinstance(schema, dict) or depth > MAX_DEPTH:
        return None

    if "example" in schema:
        return copy.deepcopy(schema["example"])
    if "default" in schema:
        return copy.deepcopy(schema["default"])
    enum = schema.get("enum")
    if enum:
        return copy.deepcopy(enum[0])

    schema_type = _schema_type(schema)
    if schema_type == "string":
        return _string_example(schema)
    if schema_type == "integer":
        return schema.get("minimum", 1)
    if schema_type == "number":
        return schema.get("minimum", 1.0)
    if schema_type == "boolean":
        return True
    if schema_type == "array":
        items = schema.get("items")
        if isinstance(items, dict):
            return [synthesize(items, depth + 1)]
        return []
    if schema_type == "object":
        return _object_example(schema, depth)
    return None


def _schema_type(schema: dict) -> str | None:
    schema_type = schema.get("type")
    # OpenAPI 3.1 allows a list such as ["string", "null"]
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != "null"]
        return non_null[0] if non_null else None
    return schema_type


def _string_example(schema: dict) -> str:
    fmt = schema.get("format")
    if fmt in FORMAT_EXAMPLES:
        return FORMAT_EXAMPLES[fmt]
    min_length = schema.get("minLength")
    if min_length:
        return "x" * int(min_length)
    return "string"


def _object_example(schema: dict, depth: int) -> dict:
    result = {}
    required = set(schema.get("required") or [])
    for name, prop in (schema.get("properties") or {}).items():
        if name in required or (isinstance(prop, dict) and "example" in prop):
            result[name] = synthesize(prop, depth + 1)
    return result
