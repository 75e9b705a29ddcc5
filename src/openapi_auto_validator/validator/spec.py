"""Structural checks of the contract document itself.

Meta-schema validation is delegated to openapi-spec-validator; each reported
error is classified from its jsonschema keyword. A few lint checks are added
on top, some of which only fail the document in strict mode.
"""

from enum import Enum

from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
)
from pydantic import BaseModel

from openapi_auto_validator.errors import SpecReferenceError
from openapi_auto_validator.parser.openapi import dereference

LINT_METHODS = ("get", "post", "put", "patch", "delete", "options", "head")


class IssueType(str, Enum):
    SYNTAX = "syntax-error"
    MISSING_FIELD = "missing-field"
    INVALID_TYPE = "invalid-type"
    REF = "ref-error"
    VALIDATION = "validation-error"
    STRICT = "warning-as-error"


ISSUE_LABELS = {
    IssueType.SYNTAX: "SYNTAX",
    IssueType.MISSING_FIELD: "MISSING FIELD",
    IssueType.INVALID_TYPE: "INVALID TYPE",
    IssueType.REF: "REF ERROR",
    IssueType.VALIDATION: "VALIDATION",
    IssueType.STRICT: "STRICT",
}


class SpecIssue(BaseModel):
    type: IssueType
    message: str
    path: str | None = None

    @property
    def label(self) -> str:
        return ISSUE_LABELS[self.type]


class SpecInfo(BaseModel):
    title: str = ""
    version: str = ""
    openapi_version: str | None = None
    path_count: int = 0
    schema_count: int = 0


class SpecReport(BaseModel):
    valid: bool
    errors: list[SpecIssue] = []
    warnings: list[str] = []
    info: SpecInfo | None = None


def _meta_validator(doc: dict):
    if "swagger" in doc:
        return OpenAPIV2SpecValidator
    if str(doc.get("openapi", "")).startswith("3.1"):
        return OpenAPIV31SpecValidator
    return OpenAPIV30SpecValidator


def _classify(keyword: str | None) -> IssueType:
    if keyword == "required":
        return IssueType.MISSING_FIELD
    if keyword == "type":
        return IssueType.INVALID_TYPE
    return IssueType.VALIDATION


def meta_schema_issues(doc: dict) -> list[SpecIssue]:
    """Run the OpenAPI meta-schema validator and classify its errors."""
    if "openapi" not in doc and "swagger" not in doc:
        return [SpecIssue(
            type=IssueType.MISSING_FIELD,
            message="Missing required field: openapi (or swagger for v2)",
            path="openapi",
        )]

    issues = []
    for error in _meta_validator(doc)(doc).iter_errors():
        path = "/".join(str(p) for p in getattr(error, "absolute_path", []))
        issues.append(SpecIssue(
            type=_classify(getattr(error, "validator", None)),
            message=getattr(error, "message", str(error)),
            path=path or None,
        ))
    return issues


def spec_info(doc: dict) -> SpecInfo:
    info = doc.get("info") or {}
    if "openapi" in doc:
        openapi_version = str(doc["openapi"])
    elif "swagger" in doc:
        openapi_version = f"Swagger {doc['swagger']}"
    else:
        openapi_version = None

    schemas = (doc.get("components") or {}).get("schemas") or doc.get("definitions") or {}
    return SpecInfo(
        title=str(info.get("title", "")),
        version=str(info.get("version", "")),
        openapi_version=openapi_version,
        path_count=len(doc.get("paths") or {}),
        schema_count=len(schemas),
    )


def _operations(doc: dict):
    for path, path_item in (doc.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method in LINT_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                yield path, method.upper(), operation


def lint(doc: dict) -> tuple[list[str], list[str]]:
    """Return (strict_errors, warnings) for style problems in the document."""
    strict_errors: list[str] = []
    warnings: list[str] = []

    if not doc.get("paths"):
        warnings.append("No paths defined in the specification")
    if not (doc.get("info") or {}).get("description"):
        warnings.append("Missing API description")

    for path, method, operation in _operations(doc):
        if not operation.get("operationId"):
            warnings.append(f"Missing operationId for {method} {path}")
        if not operation.get("summary") and not operation.get("description"):
            warnings.append(f"Missing summary/description for {method} {path}")
        if not operation.get("responses"):
            strict_errors.append(f"No responses defined for {method} {path}")

    if "openapi" in doc and doc.get("security"):
        if not (doc.get("components") or {}).get("securitySchemes"):
            strict_errors.append("Security requirements defined but no security schemes found")

    return strict_errors, warnings


def validate_document(doc: dict, strict: bool = False) -> SpecReport:
    """Check a loaded (not yet dereferenced) contract document."""
    try:
        dereference(doc)
    except SpecReferenceError as e:
        return SpecReport(valid=False, errors=[SpecIssue(type=IssueType.REF, message=str(e))])

    errors = meta_schema_issues(doc)
    strict_errors, warnings = lint(doc)
    if strict:
        errors.extend(SpecIssue(type=IssueType.STRICT, message=msg) for msg in strict_errors)

    return SpecReport(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        info=spec_info(doc),
    )
