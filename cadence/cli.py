#!/usr/bin/env python3
"""
Cadence CLI - HTTP API Assertion Runner

Usage:
    cadence run <suite.yaml> [OPTIONS]
    cadence validate <suite.yaml>
    cadence get <url> [-p name=value]... [-q name=value]... [--extract PATH]
    cadence --version
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .reporting import CaseRecord, Reporter, StepStatus
from .runner import ExtractionError, extract, run as run_request
from .suites import Case, SuiteExecutor, load_suite
from .transport import BodyParseError, RequestSpec, TransportError

app = typer.Typer(
    name="cadence",
    help="Cadence - HTTP API Assertion Runner",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def version_callback(value: bool):
    if value:
        console.print(f"Cadence v{__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
    log_level: str = typer.Option(
        "WARNING", "--log-level", "-l",
        help="Logging level: DEBUG, INFO, WARNING or ERROR"
    ),
):
    """
    Cadence - HTTP API Assertion Runner

    Send HTTP requests and assert on status codes, headers and JSON bodies.
    """
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise typer.BadParameter(f"must be one of {', '.join(LOG_LEVELS)}", param_hint="--log-level")
    configure_logging(level)


def parse_pairs(values: Optional[List[str]], option: str) -> dict[str, str]:
    """Parse repeated name=value options into a dict."""
    pairs: dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"expected name=value, got {item!r}", param_hint=option)
        pairs[name] = value
    return pairs


def _print_case(case: Case, record: Optional[CaseRecord]) -> None:
    if record is None:
        return
    icon = {
        StepStatus.PASSED: "[green]✅[/green]",
        StepStatus.FAILED: "[red]❌[/red]",
        StepStatus.ERROR: "[yellow]⚠️[/yellow]",
        StepStatus.SKIPPED: "⏭️",
    }.get(record.status, "❓")
    console.print(f"{icon} [bold]{case.id}[/bold]")
    for step in record.steps:
        if step.status == StepStatus.SKIPPED:
            continue
        code = step.status_code if step.status_code is not None else "-"
        console.print(f"   {step.method} {escape(step.url or step.url_template)} → {code}")
        for result in step.assertions:
            if not result.passed:
                console.print(f"[red]{escape(_indent(str(result), 5))}[/red]")
        if step.error_message:
            console.print(f"     [yellow]Error:[/yellow] {escape(step.error_message)}")


def _indent(text: str, width: int) -> str:
    pad = " " * width
    return "\n".join(pad + line for line in text.splitlines())


@app.command()
def run(
    suite_file: Path = typer.Argument(
        ...,
        help="Path to the suite YAML file",
        exists=True,
        readable=True,
    ),
    case: Optional[List[str]] = typer.Option(
        None, "--case", "-c",
        help="Only run the case with this id (repeatable)"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Only show the final status"
    ),
    output: str = typer.Option(
        "text", "--output", "-o",
        help="Output format: text or json"
    ),
    report_dir: Path = typer.Option(
        Path("reports"), "--report-dir", "-r",
        help="Directory to save JSON reports"
    ),
    no_report: bool = typer.Option(
        False, "--no-report",
        help="Don't save a JSON report file"
    ),
):
    """
    Run a test suite.

    Execute every case in the suite, perform assertions,
    and generate a run report.
    """
    if output not in ("text", "json"):
        raise typer.BadParameter("must be 'text' or 'json'", param_hint="--output")

    show_progress = output == "text" and not quiet

    if show_progress:
        console.print(f"\n📄 Loading suite: {suite_file}")

    suite, validation = load_suite(suite_file)

    if not validation.is_valid:
        console.print(f"\n[red]❌ Validation failed:[/red]")
        console.print(str(validation), markup=False)
        raise typer.Exit(code=1)

    unknown = [c for c in case or [] if suite.get_case(c) is None]
    if unknown:
        console.print(f"[red]❌ Unknown case id(s):[/red] {escape(', '.join(unknown))}")
        raise typer.Exit(code=1)

    if show_progress:
        console.print(f"   [green]✅ Valid suite:[/green] {suite.name} ({len(suite.cases)} cases)\n")

    reporter = Reporter.from_suite(suite)
    executor = SuiteExecutor(
        suite,
        reporter=reporter,
        on_case_complete=_print_case if show_progress else None,
    )
    report = asyncio.run(executor.run(case_ids=case or None))

    if output == "json":
        console.print_json(data=report.to_dict())
    else:
        console.print("\n" + report.summary(), markup=False)

    if not no_report:
        report_path = report_dir / f"{report.run_id}.json"
        reporter.save_json(report_path)
        if show_progress:
            console.print(f"\n📁 Report saved: {report_path}")

    if report.status.value == "passed":
        raise typer.Exit(code=0)
    else:
        raise typer.Exit(code=1)


@app.command()
def validate(
    suite_file: Path = typer.Argument(
        ...,
        help="Path to the suite YAML file",
        exists=True,
        readable=True,
    ),
):
    """
    Validate a suite YAML file.

    Check the schema and report any errors without sending requests.
    """
    console.print(f"\n📄 Validating: {suite_file}")

    suite, validation = load_suite(suite_file)

    if not validation.is_valid:
        console.print(f"\n[red]❌ Validation failed:[/red]")
        console.print(str(validation), markup=False)
        raise typer.Exit(code=1)

    console.print(f"\n[green]✅ Valid suite:[/green] {suite.name}")
    if suite.base_url:
        console.print(f"   Base URL: {suite.base_url}")
    console.print(f"   Cases: {len(suite.cases)}")

    table = Table(title="Cases")
    table.add_column("ID", style="cyan")
    table.add_column("Steps", style="magenta", justify="right")
    table.add_column("Requests")
    table.add_column("Checks", justify="right")

    for c in suite.cases:
        requests = "\n".join(f"{s.request.method} {s.request.url}" for s in c.steps)
        checks = sum(len(s.expect) for s in c.steps)
        table.add_row(c.id, str(len(c.steps)), requests, str(checks))

    console.print()
    console.print(table)


@app.command()
def get(
    url: str = typer.Argument(..., help="URL template, may contain {name} placeholders"),
    path_param: Optional[List[str]] = typer.Option(
        None, "--path-param", "-p",
        help="Path parameter as name=value (repeatable)"
    ),
    query: Optional[List[str]] = typer.Option(
        None, "--query", "-q",
        help="Query parameter as name=value (repeatable)"
    ),
    header: Optional[List[str]] = typer.Option(
        None, "--header", "-H",
        help="Request header as name=value (repeatable)"
    ),
    extract_path: Optional[str] = typer.Option(
        None, "--extract", "-e",
        help="Print only the value at this JSONPath"
    ),
    timeout_ms: int = typer.Option(
        30000, "--timeout-ms",
        help="Request timeout in milliseconds"
    ),
):
    """
    Send a single GET request and show the response.
    """
    spec = RequestSpec(
        url=url,
        path_params=parse_pairs(path_param, "--path-param"),
        query_params=parse_pairs(query, "--query"),
        headers=parse_pairs(header, "--header"),
        timeout_ms=timeout_ms,
    )

    try:
        response = run_request(spec)
    except TransportError as e:
        console.print(f"[red]❌ Transport error:[/red] {escape(str(e))}")
        raise typer.Exit(code=2)

    if extract_path:
        try:
            value = extract(response, extract_path)
        except ExtractionError as e:
            console.print(f"[red]❌ {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        if isinstance(value, (dict, list)):
            console.print_json(data=value)
        else:
            console.print(str(value), markup=False)
        return

    console.print(f"[bold]HTTP {response.status_code}[/bold] {escape(response.reason or '')}  {escape(str(response.url))}")
    for name, value in response.headers.items():
        console.print(f"[cyan]{escape(name)}[/cyan]: {escape(value)}", highlight=False)
    console.print()
    if response.is_json:
        try:
            console.print_json(json.dumps(response.json()))
            return
        except BodyParseError:
            pass
    console.print(response.text, markup=False)


@app.command()
def info():
    """
    Show information about Cadence.
    """
    console.print(f"""
[bold]Cadence[/bold] v{__version__}

HTTP API Assertion Runner

[bold]Features:[/bold]
  • URL templates with path and query parameters
  • Status, header, content type and JSONPath body assertions
  • Value extraction chained into later requests
  • Declarative YAML test suites
  • Detailed JSON run reports

[bold]Quick Start:[/bold]
  cadence run suites/ergast.yaml
  cadence validate suites/ergast.yaml
  cadence get "http://md5.jsontest.com" -q text=oohrah -e md5
""")


if __name__ == "__main__":
    app()
