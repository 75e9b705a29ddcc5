"""JSON-Schema conformance evaluator backed by jsonschema."""

import re
from typing import Any

from jsonschema import Draft4Validator, Draft202012Validator, FormatChecker
from jsonschema.exceptions import SchemaError, UnknownType
from pydantic import BaseModel


class Violation(BaseModel):
    location: str  # JSON pointer into the instance, "" for the root
    message: str


def _pointer(path) -> str:
    return "".join(f"/{part}" for part in path)


def to_json_schema(schema: Any, seen: dict | None = None) -> Any:
    """Translate OpenAPI 3.0 schema extensions into plain JSON Schema.

    `nullable: true` becomes an added "null" type. Cyclic schemas are
    translated once per node, keeping the cycle.
    """
    if seen is None:
        seen = {}
    if isinstance(schema, list):
        return [to_json_schema(s, seen) for s in schema]
    if not isinstance(schema, dict):
        return schema
    if id(schema) in seen:
        return seen[id(schema)]

    result: dict = {}
    seen[id(schema)] = result
    for key, value in schema.items():
        if key in ("example", "examples", "default", "enum", "const"):
            result[key] = value
        else:
            result[key] = to_json_schema(value, seen)

    if result.pop("nullable", False) is True:
        schema_type = result.get("type")
        if isinstance(schema_type, str):
            result["type"] = [schema_type, "null"]
        if "enum" in result and None not in result["enum"]:
            result["enum"] = [*result["enum"], None]
    return result


class SchemaEvaluator:
    """Checks values against schemas and reports every violation."""

    def __init__(self, openapi_version: str = "3.0"):
        self.openapi_version = openapi_version
        if openapi_version.startswith("3.1"):
            self.validator_cls = Draft202012Validator
        else:
            self.validator_cls = Draft4Validator
        self.format_checker = FormatChecker()

    def evaluate(self, schema: dict, value: Any) -> tuple[bool, list[Violation]]:
        """Return (valid, violations) for `value` against `schema`.

        A schema jsonschema cannot apply (an unknown type, a pattern Python's
        `re` rejects) is reported as a root violation instead of raising.
        """
        if self.validator_cls is Draft4Validator:
            schema = to_json_schema(schema)
        validator = self.validator_cls(schema, format_checker=self.format_checker)
        try:
            errors = sorted(validator.iter_errors(value), key=lambda e: _pointer(e.absolute_path))
        except UnknownType as e:
            return False, [Violation(location="", message=f"Unsupported schema type {e.type!r}")]
        except SchemaError as e:
            return False, [Violation(location="", message=f"Invalid schema: {e.message}")]
        except re.error as e:
            return False, [Violation(location="", message=f"Unsupported schema pattern: {e}")]
        violations = [
            Violation(location=_pointer(e.absolute_path), message=e.message)
            for e in errors
        ]
        return not violations, violations
