"""Check a live response against the operation it answers.

All three checks always run; the caller receives every violation, ordered
status first, then headers, then body.
"""

from typing import Any

from pydantic import BaseModel

from openapi_auto_validator.parser.base import Operation
from openapi_auto_validator.transport import TransportResponse
from openapi_auto_validator.validator.schema import SchemaEvaluator

FAILURE_SUMMARY = "Response validation failed"


class CheckResult(BaseModel):
    passed: bool
    error: str | None = None
    details: list[str] = []


def response_selectors(status_code: int) -> list[str]:
    """Selectors tried for a status, in priority order."""
    code = str(status_code)
    return [code, f"{code[0]}XX", "default"]


def match_response(status_code: int, responses: dict) -> tuple[str, dict] | None:
    """Return (selector, response spec) for the first matching selector."""
    for selector in response_selectors(status_code):
        if selector in responses:
            return selector, responses[selector]
    return None


def check_status(status_code: int, operation: Operation) -> list[str]:
    if not operation.responses:
        return []
    if match_response(status_code, operation.responses) is None:
        return [f"Unexpected status code {status_code} - not defined in spec"]
    return []


def coerce_header(value: str, schema: dict) -> Any:
    """Convert a wire header string to the scalar type its schema declares."""
    schema_type = schema.get("type")
    try:
        if schema_type == "integer":
            return int(value.strip())
        if schema_type == "number":
            return float(value.strip())
    except ValueError:
        return value
    if schema_type == "boolean" and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return value


def check_headers(response: TransportResponse, spec: dict, evaluator: SchemaEvaluator) -> list[str]:
    details = []
    for name, header_spec in (spec.get("headers") or {}).items():
        if not isinstance(header_spec, dict):
            continue
        value = response.header(name)

        if value is None:
            if header_spec.get("required"):
                details.append(f"Header '{name}': Required header is missing")
            continue

        schema = header_spec.get("schema")
        if isinstance(schema, dict):
            valid, violations = evaluator.evaluate(schema, coerce_header(value, schema))
            if not valid:
                messages = ", ".join(v.message for v in violations)
                details.append(f"Header '{name}': {messages}")
    return details


def check_body(response: TransportResponse, spec: dict, evaluator: SchemaEvaluator) -> list[str]:
    media = (spec.get("content") or {}).get("application/json")
    if not isinstance(media, dict) or media.get("schema") is None:
        return []

    valid, violations = evaluator.evaluate(media["schema"], response.body)
    if valid:
        return []
    return [f"Body {v.location or 'root'}: {v.message}" for v in violations]


def check_response(
    response: TransportResponse,
    operation: Operation,
    evaluator: SchemaEvaluator | None = None,
) -> CheckResult:
    """Evaluate one response against an operation's declared responses."""
    evaluator = evaluator or SchemaEvaluator()
    details = check_status(response.status_code, operation)

    matched = match_response(response.status_code, operation.responses)
    if matched is not None:
        _, spec = matched
        details.extend(check_headers(response, spec, evaluator))
        details.extend(check_body(response, spec, evaluator))

    if details:
        return CheckResult(passed=False, error=FAILURE_SUMMARY, details=details)
    return CheckResult(passed=True)
