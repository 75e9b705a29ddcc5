"""Data models for operations read out of a dereferenced OpenAPI document.

The parser converts raw path items into these models so the generators and the
response checker never walk the document themselves.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class Param(BaseModel):
    """A single declared parameter (path, query, header, or cookie)."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: str  # path / query / header / cookie
    required: bool = False
    description: str = ""
    schema_def: dict | None = None
    example: Any = None
    examples: dict = {}

    @property
    def has_example(self) -> bool:
        # An explicit `example: null` still counts as declared.
        return "example" in self.model_fields_set

    @property
    def key(self) -> tuple[str, str]:
        return self.name, self.location


class Operation(BaseModel):
    """One HTTP method on one path template."""

    model_config = ConfigDict(frozen=True)

    method: str  # GET / POST / PUT / PATCH / DELETE
    path: str  # /users/{id}
    summary: str = ""
    operation_id: str | None = None
    parameters: list[Param] = []
    request_body: dict | None = None
    responses: dict = {}  # {selector: response object}
    tags: list[str] = []

    def params_in(self, location: str) -> list[Param]:
        return [p for p in self.parameters if p.location == location]

    def find_param(self, name: str, location: str) -> Param | None:
        for p in self.parameters:
            if p.name == name and p.location == location:
                return p
        return None
