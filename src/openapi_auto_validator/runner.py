"""Endpoint runner and contract walker.

Walks every operation of a dereferenced document, sends one synthesized
request per operation and turns the exchange into an EndpointVerdict.
"""

import logging
import time
from fnmatch import fnmatchcase

from openapi_auto_validator.errors import SpecReferenceError, TransportError
from openapi_auto_validator.generator.body import build_request_body
from openapi_auto_validator.generator.params import build_query_params, resolve_path
from openapi_auto_validator.parser.base import Operation
from openapi_auto_validator.parser.openapi import dereference, parse_operations, spec_version
from openapi_auto_validator.result import EndpointVerdict, Outcome
from openapi_auto_validator.transport import RequestsTransport
from openapi_auto_validator.validator.response import check_response
from openapi_auto_validator.validator.schema import SchemaEvaluator

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


def filter_operations(operations: list[Operation], patterns: list[str] | None) -> list[Operation]:
    """Keep operations matching any of `patterns`.

    A pattern is `PATH` or `METHOD PATH`; the path part may use shell-style
    wildcards. No patterns keeps everything.
    """
    if not patterns:
        return list(operations)

    parsed = []
    for pattern in patterns:
        parts = pattern.strip().split(None, 1)
        if len(parts) == 2:
            parsed.append((parts[0].upper(), parts[1]))
        elif parts:
            parsed.append((None, parts[0]))

    return [
        op for op in operations
        if any(
            (method is None or method == op.method)
            and (op.path == path or fnmatchcase(op.path, path))
            for method, path in parsed
        )
    ]


def document_failure(message: str) -> list[EndpointVerdict]:
    return [EndpointVerdict(path="/", method="GET", outcome=Outcome.FAILED, error=message)]


class ContractValidator:
    """Tests a live API against its OpenAPI document."""

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout = timeout
        self.transport = transport or RequestsTransport()

    def validate(self, document: dict, endpoints: list[str] | None = None) -> list[EndpointVerdict]:
        """Test every operation in `document`, in document order."""
        try:
            api = dereference(document)
        except SpecReferenceError as e:
            logger.debug("dereference failed: %s", e)
            return document_failure(str(e))

        if not api.get("paths"):
            return document_failure("No paths defined in specification")

        declared = parse_operations(api)
        if not declared:
            return document_failure("No operations defined in specification")

        operations = filter_operations(declared, endpoints)
        evaluator = SchemaEvaluator(spec_version(api) or "3.0")
        logger.debug("testing %d operations against %s", len(operations), self.base_url)
        return [self.test_operation(op, evaluator) for op in operations]

    def test_operation(self, operation: Operation, evaluator: SchemaEvaluator | None = None) -> EndpointVerdict:
        """Send one request for `operation` and judge the response."""
        resolution = resolve_path(operation.path, operation)
        if resolution.skipped:
            logger.debug("skipping %s %s: %s", operation.method, operation.path, resolution.skip_reason)
            return EndpointVerdict(
                path=operation.path,
                method=operation.method,
                outcome=Outcome.SKIPPED,
                error=resolution.skip_reason,
            )

        params = build_query_params(operation)
        body = build_request_body(operation)
        headers = {**self.headers, "Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = body.content_type

        start = time.perf_counter()
        try:
            response = self.transport.send(
                operation.method,
                f"{self.base_url}{resolution.resolved_path}",
                headers=headers,
                params=params,
                body=body.value if body else None,
                content_type=body.content_type if body else None,
                timeout=self.timeout,
            )
        except TransportError as e:
            return EndpointVerdict(
                path=operation.path,
                method=operation.method,
                outcome=Outcome.FAILED,
                duration_ms=_elapsed_ms(start),
                error=e.message,
            )
        duration = _elapsed_ms(start)

        try:
            result = check_response(response, operation, evaluator)
        except Exception as e:
            logger.debug("checking %s %s failed", operation.method, operation.path, exc_info=True)
            return EndpointVerdict(
                path=operation.path,
                method=operation.method,
                outcome=Outcome.FAILED,
                status_code=response.status_code,
                duration_ms=duration,
                error=f"Response check failed: {e}",
            )
        return EndpointVerdict(
            path=operation.path,
            method=operation.method,
            outcome=Outcome.PASSED if result.passed else Outcome.FAILED,
            status_code=response.status_code,
            duration_ms=duration,
            error=result.error,
            details=result.details,
        )


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 1)
