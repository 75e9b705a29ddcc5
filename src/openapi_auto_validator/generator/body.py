"""Request body builder for write operations."""

import copy
from typing import Any

from pydantic import BaseModel

from openapi_auto_validator.generator.example import synthesize
from openapi_auto_validator.parser.base import Operation

JSON = "application/json"
FORM = "application/x-www-form-urlencoded"

CONTENT_TYPES = (JSON, FORM)
BODY_METHODS = ("POST", "PUT", "PATCH")


class RequestBody(BaseModel):
    value: Any
    content_type: str


def build_request_body(operation: Operation) -> RequestBody | None:
    """Build the body for an operation, preferring JSON over form data.

    Returns None when the operation is not a write, declares no body, or
    declares neither supported content type.
    """
    if operation.method not in BODY_METHODS or not operation.request_body:
        return None

    content = operation.request_body.get("content") or {}
    for content_type in CONTENT_TYPES:
        media = content.get(content_type)
        if media is not None:
            return RequestBody(value=media_example(media), content_type=content_type)
    return None


def media_example(media: dict) -> Any:
    """Example for a media type object: example, first named example, schema."""
    if "example" in media:
        return copy.deepcopy(media["example"])

    for example in (media.get("examples") or {}).values():
        if isinstance(example, dict) and "value" in example:
            return copy.deepcopy(example["value"])
        break

    if media.get("schema") is not None:
        return synthesize(media["schema"])
    return {}
