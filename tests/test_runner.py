from pathlib import Path
from unittest.mock import MagicMock, patch

from openapi_auto_validator.errors import TransportError
from openapi_auto_validator.parser.base import Operation
from openapi_auto_validator.parser.openapi import load_spec
from openapi_auto_validator.result import Outcome
from openapi_auto_validator.runner import ContractValidator, filter_operations
from openapi_auto_validator.transport import TransportResponse

FIXTURES = Path(__file__).parent / "fixtures"


def _validator(*responses, **kwargs) -> tuple[ContractValidator, MagicMock]:
    transport = MagicMock()
    transport.send.side_effect = list(responses)
    return ContractValidator(base_url="http://localhost:3000", transport=transport, **kwargs), transport


def _ok(status: int = 200, body=None, headers: dict | None = None) -> TransportResponse:
    return TransportResponse(status_code=status, body=body, headers=headers or {})


class TestFilterOperations:
    OPS = [
        Operation(method="GET", path="/pets"),
        Operation(method="POST", path="/pets"),
        Operation(method="GET", path="/pets/{id}"),
        Operation(method="GET", path="/users"),
    ]

    def test_no_filter(self):
        assert len(filter_operations(self.OPS, None)) == 4

    def test_exact_path(self):
        result = filter_operations(self.OPS, ["/pets"])
        assert [(o.method, o.path) for o in result] == [("GET", "/pets"), ("POST", "/pets")]

    def test_literal_template(self):
        assert [o.path for o in filter_operations(self.OPS, ["/pets/{id}"])] == ["/pets/{id}"]

    def test_method_and_path(self):
        result = filter_operations(self.OPS, ["post /pets"])
        assert [(o.method, o.path) for o in result] == [("POST", "/pets")]

    def test_glob(self):
        assert [o.path for o in filter_operations(self.OPS, ["/pets/*"])] == ["/pets/{id}"]

    def test_no_match(self):
        assert filter_operations(self.OPS, ["DELETE /orders"]) == []


class TestValidate:
    def test_successful_response(self):
        validator, transport = _validator(_ok(200, [{"id": 1, "name": "John"}, {"id": 2, "name": "Jane"}]), _ok(201, {"id": 1, "name": "Test User"}))
        results = validator.validate(load_spec(FIXTURES / "users.yaml"), ["/users"])

        get_result = results[0]
        assert get_result.method == "GET"
        assert get_result.path == "/users"
        assert get_result.outcome is Outcome.PASSED
        assert get_result.status_code == 200

    def test_schema_mismatch_fails(self):
        validator, _ = _validator(_ok(200, [{"id": "x", "name": "John"}]), _ok(201, {"id": 1, "name": "a"}))
        get_result = validator.validate(load_spec(FIXTURES / "users.yaml"), ["GET /users"])[0]

        assert get_result.outcome is Outcome.FAILED
        assert get_result.error == "Response validation failed"
        assert len(get_result.details) == 1
        assert get_result.details[0].startswith("Body /0/id:")

    def test_post_sends_example_body(self):
        validator, transport = _validator(_ok(201, {"id": 1, "name": "Test User"}))
        results = validator.validate(load_spec(FIXTURES / "users.yaml"), ["POST /users"])

        assert results[0].outcome is Outcome.PASSED
        assert results[0].status_code == 201
        args, kwargs = transport.send.call_args
        assert args == ("POST", "http://localhost:3000/users")
        assert kwargs["body"] == {"name": "Test User", "email": "test@example.com"}
        assert kwargs["content_type"] == "application/json"
        assert kwargs["headers"]["Content-Type"] == "application/json"

    def test_get_has_no_content_type(self):
        validator, transport = _validator(_ok(200, []))
        validator.validate(load_spec(FIXTURES / "users.yaml"), ["GET /users"])
        kwargs = transport.send.call_args[1]
        assert "Content-Type" not in kwargs["headers"]
        assert kwargs["body"] is None

    def test_resolves_path_parameters(self):
        validator, transport = _validator(_ok(200, {"id": 123, "name": "John"}, {"X-Rate-Limit": "99"}))
        results = validator.validate(load_spec(FIXTURES / "users.yaml"), ["/users/{id}"])

        assert transport.send.call_args[0][1] == "http://localhost:3000/users/123"
        assert results[0].outcome is Outcome.PASSED

    def test_skips_without_path_example(self):
        validator, transport = _validator()
        results = validator.validate(load_spec(FIXTURES / "users.yaml"), ["/users/{id}/posts"])

        assert len(results) == 1
        assert results[0].outcome is Outcome.SKIPPED
        assert results[0].duration_ms == 0
        assert "id" in results[0].error
        transport.send.assert_not_called()

    def test_connection_refused_does_not_stop_walk(self):
        validator, transport = _validator(
            TransportError("Connection refused - is the server running?", refused=True),
            _ok(201, {"id": 1, "name": "a"}),
        )
        results = validator.validate(load_spec(FIXTURES / "users.yaml"), ["/users"])

        assert results[0].outcome is Outcome.FAILED
        assert results[0].error == "Connection refused - is the server running?"
        assert results[0].status_code is None
        assert results[0].details == []
        assert results[1].outcome is Outcome.PASSED

    def test_unexpected_status(self):
        validator, _ = _validator(_ok(500, {"error": "Server error"}), _ok(201, {"id": 1, "name": "a"}))
        results = validator.validate(load_spec(FIXTURES / "users.yaml"), ["/users"])
        assert results[0].outcome is Outcome.FAILED
        assert "Unexpected status code 500 - not defined in spec" in results[0].details

    def test_strips_trailing_slash(self):
        transport = MagicMock()
        transport.send.return_value = _ok(200, [])
        validator = ContractValidator(base_url="http://localhost:3000/", transport=transport)
        validator.validate(load_spec(FIXTURES / "users.yaml"), ["GET /users"])
        assert transport.send.call_args[0][1] == "http://localhost:3000/users"

    def test_custom_headers_and_accept(self):
        validator, transport = _validator(
            _ok(200, []),
            headers={"Authorization": "Bearer token123", "Accept": "text/html"},
            timeout=2.0,
        )
        validator.validate(load_spec(FIXTURES / "users.yaml"), ["GET /users"])
        kwargs = transport.send.call_args[1]
        assert kwargs["headers"] == {"Authorization": "Bearer token123", "Accept": "application/json"}
        assert kwargs["timeout"] == 2.0

    def test_full_walk_in_document_order(self):
        validator, _ = _validator(
            _ok(200, []),
            _ok(201, {"id": 1, "name": "a"}),
            _ok(404),
        )
        results = validator.validate(load_spec(FIXTURES / "users.yaml"))
        assert [(r.method, r.path, r.outcome) for r in results] == [
            ("GET", "/users", Outcome.PASSED),
            ("POST", "/users", Outcome.PASSED),
            ("GET", "/users/{id}", Outcome.PASSED),
            ("GET", "/users/{id}/posts", Outcome.SKIPPED),
        ]

    def test_idempotent(self):
        doc = load_spec(FIXTURES / "users.yaml")
        responses = [_ok(200, [{"id": "x", "name": "a"}]), _ok(201, {"id": 1, "name": "a"}), _ok(200, {"id": 1, "name": "a"})]

        first, _ = _validator(*responses)
        second, _ = _validator(*responses)
        run1 = [v.model_dump(exclude={"duration_ms"}) for v in first.validate(doc)]
        run2 = [v.model_dump(exclude={"duration_ms"}) for v in second.validate(doc)]
        assert run1 == run2


class TestDocumentFailures:
    def test_no_paths(self):
        validator, _ = _validator()
        results = validator.validate({"openapi": "3.0.3", "info": {"title": "t", "version": "1"}})
        assert len(results) == 1
        assert results[0].outcome is Outcome.FAILED
        assert results[0].path == "/"
        assert results[0].error == "No paths defined in specification"

    def test_bad_reference(self):
        validator, _ = _validator()
        doc = {"openapi": "3.0.3", "paths": {"/x": {"get": {"responses": {"$ref": "#/nope"}}}}}
        results = validator.validate(doc)
        assert len(results) == 1
        assert results[0].outcome is Outcome.FAILED
        assert "#/nope" in results[0].error

    def test_filter_matching_nothing(self):
        validator, _ = _validator()
        assert validator.validate(load_spec(FIXTURES / "users.yaml"), ["/orders"]) == []

    def test_paths_without_testable_operations(self):
        validator, transport = _validator()
        doc = {"openapi": "3.0.3", "paths": {"/a": {"options": {"responses": {"200": {"description": "ok"}}}}}}
        results = validator.validate(doc)
        assert len(results) == 1
        assert results[0].outcome is Outcome.FAILED
        assert results[0].error == "No operations defined in specification"
        transport.send.assert_not_called()


class TestUnusableSchemas:
    def test_unsupported_pattern_fails_only_its_operation(self):
        doc = {
            "openapi": "3.0.3",
            "paths": {
                "/a": {"get": {"responses": {"200": {
                    "description": "ok",
                    "content": {"application/json": {"schema": {"type": "string", "pattern": "^\\p{L}+$"}}},
                }}}},
                "/b": {"get": {"responses": {"200": {
                    "description": "ok",
                    "content": {"application/json": {"schema": {"type": "string"}}},
                }}}},
            },
        }
        validator, _ = _validator(_ok(200, "abc"), _ok(200, "abc"))
        first, second = validator.validate(doc)

        assert first.outcome is Outcome.FAILED
        assert first.details[0].startswith("Body root: Unsupported schema pattern")
        assert second.outcome is Outcome.PASSED

    def test_swagger2_file_response(self):
        doc = {
            "swagger": "2.0",
            "info": {"title": "Files", "version": "1"},
            "paths": {
                "/download": {"get": {"responses": {"200": {"description": "file", "schema": {"type": "file"}}}}},
                "/ping": {"get": {"responses": {"200": {"description": "ok", "schema": {"type": "string"}}}}},
            },
        }
        validator, _ = _validator(_ok(200, "binary"), _ok(200, "pong"))
        download, ping = validator.validate(doc)

        assert download.outcome is Outcome.FAILED
        assert download.details == ["Body root: Unsupported schema type 'file'"]
        assert ping.outcome is Outcome.PASSED

    @patch("openapi_auto_validator.runner.check_response")
    def test_check_error_becomes_failed_verdict(self, mock_check):
        mock_check.side_effect = RuntimeError("boom")
        validator, _ = _validator(_ok(200, []), _ok(201, {}))
        results = validator.validate(load_spec(FIXTURES / "users.yaml"), ["/users"])

        assert [r.outcome for r in results] == [Outcome.FAILED, Outcome.FAILED]
        assert results[0].status_code == 200
        assert results[0].error == "Response check failed: boom"
