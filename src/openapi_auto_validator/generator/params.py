"""Fill path and query parameters for one operation."""

import re
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel

from openapi_auto_validator.generator.example import synthesize
from openapi_auto_validator.parser.base import Operation, Param

PLACEHOLDER = re.compile(r"\{([^}]+)\}")


class PathResolution(BaseModel):
    """Either a concrete path or the reason the operation must be skipped."""

    resolved_path: str
    skip_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


def parameter_example(param: Param) -> Any:
    """Example value for a parameter, or None when none can be derived.

    Order: the parameter's own example, the first of its named examples, then
    the schema (example, default, enum, type).
    """
    if param.has_example:
        return param.example

    for example in param.examples.values():
        if isinstance(example, dict) and "value" in example:
            return example["value"]
        break

    if param.schema_def is not None:
        return synthesize(param.schema_def)
    return None


def stringify(value: Any) -> str:
    """Render a parameter value the way it appears in a URL."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(v) for v in value)
    return str(value)


def resolve_path(path: str, operation: Operation) -> PathResolution:
    """Substitute every `{name}` placeholder in `path` with an example value."""
    resolved = path
    for name in dict.fromkeys(PLACEHOLDER.findall(path)):
        param = operation.find_param(name, "path")
        if param is None:
            return PathResolution(
                resolved_path=path,
                skip_reason=f"Missing path parameter definition: {name}",
            )

        value = parameter_example(param)
        if value is None:
            return PathResolution(
                resolved_path=path,
                skip_reason=f"No example value for path parameter: {name}",
            )

        resolved = resolved.replace("{" + name + "}", quote(stringify(value), safe=""))

    return PathResolution(resolved_path=resolved)


def build_query_params(operation: Operation) -> dict[str, str]:
    """Query parameters to send: required ones and those with an example."""
    params: dict[str, str] = {}
    for param in operation.params_in("query"):
        if not (param.required or param.has_example):
            continue
        value = parameter_example(param)
        if value is not None:
            params[param.name] = stringify(value)
    return params
