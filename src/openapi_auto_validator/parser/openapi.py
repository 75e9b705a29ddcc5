"""OpenAPI / Swagger document loading and operation extraction.

Loads OpenAPI 3.x and Swagger 2.0 documents, inlines local `$ref` pointers and
converts path items into Operation models.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import yaml

from openapi_auto_validator.errors import SpecLoadError, SpecNotFoundError, SpecReferenceError
from .base import Operation, Param

METHODS = ("get", "post", "put", "patch", "delete")

# Keys copied from a Swagger 2.0 non-body parameter into a synthetic schema.
_V2_SCHEMA_KEYS = (
    "type", "format", "items", "enum", "default", "minimum", "maximum",
    "minLength", "maxLength", "pattern", "exclusiveMinimum", "exclusiveMaximum",
)


def load_spec(file_path: Path) -> dict:
    """Read a YAML or JSON contract file into a dict."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SpecNotFoundError(f"File not found: {file_path}") from e
    except OSError as e:
        raise SpecLoadError(f"Failed to load spec file: {e}") from e

    try:
        if file_path.suffix.lower() == ".json":
            doc = json.loads(text)
        else:
            # YAML is a superset of JSON
            doc = yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise SpecLoadError(f"Invalid file syntax: {e}") from e

    if not isinstance(doc, dict):
        raise SpecLoadError(f"Expected an OpenAPI mapping at {file_path}")
    return doc


def spec_version(doc: dict) -> str:
    """Return the declared `openapi` or `swagger` version string, or ''."""
    return str(doc.get("openapi") or doc.get("swagger") or "")


def is_swagger2(doc: dict) -> bool:
    return "swagger" in doc and "openapi" not in doc


# -- $ref resolution ----------------------------------------------------------


def _unescape(part: str) -> str:
    return unquote(part).replace("~1", "/").replace("~0", "~")


def _lookup(doc: dict, ref: str) -> Any:
    if not ref.startswith("#"):
        raise SpecReferenceError(f"Unsupported external $ref: {ref}")
    node: Any = doc
    pointer = ref[1:]
    if not pointer:
        return node
    for part in pointer.lstrip("/").split("/"):
        part = _unescape(part)
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            raise SpecReferenceError(f"Failed to resolve $ref pointer: {ref}")
    return node


def dereference(doc: dict) -> dict:
    """Return a copy of `doc` with every local `$ref` inlined.

    Each pointer is resolved once and the resulting object is shared by all of
    its users, so self-referencing schemas become cyclic object graphs rather
    than infinite ones. The input document is left untouched.
    """
    resolved: dict[str, Any] = {}
    pending: set[str] = set()
    # placeholders still being filled, and sibling merges waiting on them
    filling: set[int] = set()
    deferred: list[tuple[dict, dict, dict]] = []

    def resolve_ref(ref: str) -> Any:
        if ref in resolved:
            return resolved[ref]
        if ref in pending:
            raise SpecReferenceError(f"Circular $ref chain at {ref}")
        target = _lookup(doc, ref)
        if isinstance(target, dict) and "$ref" not in target:
            placeholder: dict = {}
            resolved[ref] = placeholder
            filling.add(id(placeholder))
            placeholder.update(resolve(target))
            filling.discard(id(placeholder))
            return placeholder
        pending.add(ref)
        value = resolve(target)
        pending.discard(ref)
        resolved[ref] = value
        return value

    def resolve(node: Any) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                target = resolve_ref(ref)
                siblings = {k: resolve(v) for k, v in node.items() if k != "$ref"}
                if siblings and isinstance(target, dict):
                    if id(target) in filling:
                        merged = dict(siblings)
                        deferred.append((merged, target, siblings))
                        return merged
                    return {**target, **siblings}
                return target
            return {k: resolve(v) for k, v in node.items()}
        if isinstance(node, list):
            return [resolve(v) for v in node]
        return node

    result = resolve(doc)
    for merged, target, siblings in deferred:
        merged.clear()
        merged.update({**target, **siblings})
    return result


# -- operations ---------------------------------------------------------------


def merge_parameters(path_item_params: list[Param], operation_params: list[Param]) -> list[Param]:
    """Combine path-item and operation parameters.

    Operation-level parameters shadow path-item ones with the same name and
    location. Shadowed entries keep their path-item position; new operation
    parameters follow in declaration order.
    """
    merged: dict[tuple[str, str], Param] = {p.key: p for p in path_item_params}
    for p in operation_params:
        merged[p.key] = p
    return list(merged.values())


def parse_operations(doc: dict) -> list[Operation]:
    """Extract every testable operation in document order."""
    operations = []
    v2 = is_swagger2(doc)
    paths = doc.get("paths") or {}

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        shared = _parse_parameters(path_item.get("parameters", []), v2)

        for method in METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue

            raw_params = operation.get("parameters", [])
            params = merge_parameters(shared, _parse_parameters(raw_params, v2))
            if v2:
                request_body = _v2_request_body(doc, operation, path_item)
            else:
                request_body = operation.get("requestBody")

            operations.append(
                Operation(
                    method=method.upper(),
                    path=path,
                    summary=operation.get("summary", ""),
                    operation_id=operation.get("operationId"),
                    parameters=params,
                    request_body=request_body,
                    responses=_parse_responses(operation.get("responses") or {}, v2),
                    tags=operation.get("tags", []),
                )
            )

    return operations


def _parse_parameters(params: list[dict], v2: bool = False) -> list[Param]:
    result = []
    for p in params or []:
        if not isinstance(p, dict) or "name" not in p or p.get("in") == "body":
            continue
        schema = p.get("schema")
        if schema is None and v2 and "type" in p:
            schema = {k: p[k] for k in _V2_SCHEMA_KEYS if k in p}

        fields: dict[str, Any] = {
            "name": p["name"],
            "location": p.get("in", "query"),
            "required": bool(p.get("required", False)),
            "description": p.get("description", ""),
            "schema_def": schema if isinstance(schema, dict) else None,
            "examples": p.get("examples") or {},
        }
        if "example" in p:
            fields["example"] = p["example"]
        result.append(Param(**fields))
    return result


def _v2_request_body(doc: dict, operation: dict, path_item: dict) -> dict | None:
    body_params = [
        p for p in (path_item.get("parameters", []) + operation.get("parameters", []))
        if isinstance(p, dict) and p.get("in") == "body"
    ]
    if not body_params:
        return None
    body = body_params[-1]
    consumes = operation.get("consumes") or doc.get("consumes") or ["application/json"]
    media = {"schema": body.get("schema", {})}
    return {
        "required": body.get("required", False),
        "content": {content_type: media for content_type in consumes},
    }


def _normalize_selector(key: Any) -> str:
    selector = str(key)
    if selector.lower() == "default":
        return "default"
    return selector.upper()


def _parse_responses(responses: dict, v2: bool = False) -> dict:
    result = {}
    for key, resp in responses.items():
        if not isinstance(resp, dict):
            continue
        if v2:
            resp = _v2_response(resp)
        result[_normalize_selector(key)] = resp
    return result


def _v2_response(resp: dict) -> dict:
    # Swagger 2.0 puts the schema on the response and inlines header types.
    resp = dict(resp)
    if "schema" in resp and "content" not in resp:
        resp["content"] = {"application/json": {"schema": resp.pop("schema")}}
    headers = resp.get("headers")
    if isinstance(headers, dict):
        resp["headers"] = {
            name: spec if "schema" in spec else {"schema": spec}
            for name, spec in headers.items()
            if isinstance(spec, dict)
        }
    return resp
