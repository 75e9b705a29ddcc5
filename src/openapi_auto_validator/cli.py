"""CLI entry point for openapi-auto-validator."""

import logging
from enum import IntEnum
from pathlib import Path

import click

from openapi_auto_validator.errors import SpecLoadError, SpecNotFoundError
from openapi_auto_validator.parser.openapi import load_spec
from openapi_auto_validator.report import print_spec_report, print_verdicts, write_json_report
from openapi_auto_validator.runner import ContractValidator
from openapi_auto_validator.validator.spec import IssueType, SpecIssue, SpecReport, validate_document


class ExitCode(IntEnum):
    SUCCESS = 0
    VALIDATION_FAILED = 1
    FILE_NOT_FOUND = 2


def _parse_headers(header_args: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated "Key: Value" options into a header dict."""
    headers = {}
    for header in header_args:
        key, sep, value = header.partition(":")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected 'Key: Value', got {header!r}", param_hint="--header")
        headers[key.strip()] = value.strip()
    return headers


def _parse_endpoints(endpoints: str | None) -> list[str] | None:
    if not endpoints:
        return None
    return [e.strip() for e in endpoints.split(",") if e.strip()]


def _load(spec_path: Path) -> dict:
    try:
        return load_spec(spec_path)
    except SpecNotFoundError as e:
        click.secho(str(e), fg="red")
        raise SystemExit(ExitCode.FILE_NOT_FOUND)
    except SpecLoadError as e:
        click.secho(f"Error: {e}", fg="red")
        raise SystemExit(ExitCode.VALIDATION_FAILED)


@click.group()
@click.version_option(package_name="openapi-auto-validator")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Validate OpenAPI/Swagger specs and live API responses."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strict", is_flag=True, help="Treat style warnings as errors.")
def validate_spec(spec_path: Path, strict: bool):
    """Validate an OpenAPI/Swagger specification file."""
    click.secho(f"Validating OpenAPI specification: {spec_path}\n", fg="blue")
    try:
        doc = load_spec(spec_path)
    except SpecLoadError as e:
        report = SpecReport(valid=False, errors=[SpecIssue(type=IssueType.SYNTAX, message=str(e))])
    else:
        report = validate_document(doc, strict=strict)

    print_spec_report(report)
    raise SystemExit(ExitCode.SUCCESS if report.valid else ExitCode.VALIDATION_FAILED)


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-u", "--url", required=True, envvar="API_BASE_URL", help="Base URL of the API to validate.")
@click.option("-e", "--endpoints", default=None, help="Comma-separated paths to test, e.g. '/users,GET /pets/*'.")
@click.option("-H", "--header", "headers", multiple=True, help="Custom header 'Key: Value' (repeatable).")
@click.option("--token", default=None, envvar="API_TOKEN", help="Bearer token sent as Authorization header.")
@click.option("--timeout", default=5000, type=click.IntRange(min=1), envvar="API_TIMEOUT_MS", show_default=True, help="Request timeout in milliseconds.")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Write a JSON report to this file.")
def validate_api(
    spec_path: Path,
    url: str,
    endpoints: str | None,
    headers: tuple[str, ...],
    token: str | None,
    timeout: int,
    output: Path | None,
):
    """Validate live API responses against an OpenAPI spec."""
    click.secho(f"Validating API at {url} against spec: {spec_path}", fg="blue")
    custom_headers = _parse_headers(headers)
    if token and not any(k.lower() == "authorization" for k in custom_headers):
        custom_headers["Authorization"] = f"Bearer {token}"

    doc = _load(spec_path)
    validator = ContractValidator(base_url=url, headers=custom_headers, timeout=timeout / 1000)
    verdicts = validator.validate(doc, _parse_endpoints(endpoints))

    summary = print_verdicts(verdicts)
    if output is not None:
        write_json_report(output, verdicts)
        click.echo(f"Report saved to {output}")

    raise SystemExit(ExitCode.SUCCESS if summary.success else ExitCode.VALIDATION_FAILED)
