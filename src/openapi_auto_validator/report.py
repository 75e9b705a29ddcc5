"""Terminal and JSON rendering of validation results."""

import json
from pathlib import Path

import click

from openapi_auto_validator.result import EndpointVerdict, RunSummary
from openapi_auto_validator.validator.spec import SpecReport


def format_verdict(verdict: EndpointVerdict) -> str:
    label = f"{verdict.method.upper()} {verdict.path}"
    if verdict.skipped:
        return f"○ {label} - Skipped: {verdict.error}"
    if verdict.passed:
        return f"✓ {label} - {verdict.status_code} OK ({verdict.duration_ms:.0f}ms)"
    status = f" [{verdict.status_code}]" if verdict.status_code is not None else ""
    return f"✗ {label}{status} - {verdict.error or 'Validation failed'}"


def print_verdicts(verdicts: list[EndpointVerdict]) -> RunSummary:
    """Echo one line per verdict plus the summary line; return the summary."""
    click.echo("")
    for verdict in verdicts:
        line = format_verdict(verdict)
        if verdict.skipped:
            click.secho(line, dim=True)
        elif verdict.passed:
            click.secho(line, fg="green")
        else:
            click.secho(line, fg="red")
            for detail in verdict.details:
                click.secho(f"    └─ {detail}", fg="red")
    click.echo("")

    summary = RunSummary.from_verdicts(verdicts)
    click.secho(summary.describe(), fg="green" if summary.success else "yellow")
    return summary


def write_json_report(path: Path, verdicts: list[EndpointVerdict]) -> None:
    """Save the summary and every verdict as JSON."""
    summary = RunSummary.from_verdicts(verdicts)
    data = {
        "summary": summary.model_dump(),
        "results": [v.model_dump(mode="json") for v in verdicts],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def print_spec_report(report: SpecReport) -> None:
    if report.valid:
        click.secho("OpenAPI specification is valid!\n", fg="green")
        if report.info:
            click.secho("Specification Details:", fg="blue")
            _detail("Title", report.info.title)
            _detail("Version", report.info.version)
            if report.info.openapi_version:
                _detail("OpenAPI Version", report.info.openapi_version)
            _detail("Paths", str(report.info.path_count))
            _detail("Schemas", str(report.info.schema_count))
    else:
        click.secho("OpenAPI specification is invalid!\n", fg="red")
        click.secho(f"Found {len(report.errors)} error(s):\n", fg="red")
        for i, issue in enumerate(report.errors, 1):
            click.secho(f"  {i}. [{issue.label}] {issue.message}", fg="red")
            if issue.path:
                click.secho(f"     Path: {issue.path}", fg="red")

    if report.warnings:
        click.secho(f"\nWarnings ({len(report.warnings)}):", fg="yellow")
        for i, warning in enumerate(report.warnings, 1):
            click.secho(f"  {i}. {warning}", fg="yellow")


def _detail(label: str, value: str) -> None:
    click.echo(f"  {click.style(label + ':', fg='bright_black')} {value}")
