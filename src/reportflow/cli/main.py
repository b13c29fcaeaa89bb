"""CLI for reportflow."""

import csv
import io
import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from reportflow.client.api import HttpReportingApi
from reportflow.client.report_client import ReportClient
from reportflow.config import Settings
from reportflow.exceptions import ReportflowError
from reportflow.executor.duckdb_sink import DuckDBSink
from reportflow.models.descriptor import ReportConfig, build_descriptor
from reportflow.models.result import ReportResult
from reportflow.parser.loader import ReportConfigLoader
from reportflow.step import ReportInputStep

app = typer.Typer(
    name="rf",
    help="reportflow - fetch analytics reports as flat rows",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Path, typer.Option("--config", "-c", help="Report YAML file or directory")
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def load_reports(config_path: Path) -> ReportConfigLoader:
    loader = ReportConfigLoader()
    loader.load(config_path)
    return loader


def get_step(config: ReportConfig) -> ReportInputStep:
    return ReportInputStep(config, Settings())


def get_client() -> ReportClient:
    settings = Settings()
    settings.require_credentials()
    return ReportClient(HttpReportingApi(settings))


def _load_or_exit(config_path: Path) -> ReportConfigLoader:
    try:
        return load_reports(config_path)
    except Exception as e:
        console.print(f"[red]Error loading reports: {e}[/red]")
        raise typer.Exit(1)


def _get_report_or_exit(loader: ReportConfigLoader, name: str) -> ReportConfig:
    try:
        return loader.get_report(name)
    except KeyError as e:
        console.print(f"[red]Error: {e.args[0]}[/red]")
        raise typer.Exit(1)


@app.command("list")
def list_reports(
    config_path: ConfigOption = Path("./reports"),
) -> None:
    """List configured reports."""
    loader = _load_or_exit(config_path)

    if not loader.reports:
        console.print("[yellow]No reports defined[/yellow]")
        return

    table = Table(title="Reports")
    table.add_column("Name", style="cyan")
    table.add_column("Suite", style="green")
    table.add_column("Dates")
    table.add_column("Grain", style="yellow")
    table.add_column("Elements")
    table.add_column("Metrics")

    for report in loader.reports.values():
        table.add_row(
            report.name,
            report.report_suite_id or "-",
            f"{report.start_date or '?'} .. {report.end_date or '?'}",
            report.granularity,
            ",".join(report.elements) or "-",
            ",".join(report.metrics) or "-",
        )

    console.print(table)


@app.command()
def validate(
    config_path: ConfigOption = Path("./reports"),
) -> None:
    """Validate all report definitions without contacting the service."""
    loader = _load_or_exit(config_path)

    errors = []
    for report in loader.reports.values():
        try:
            build_descriptor(report)
        except ReportflowError as e:
            errors.append(str(e))

    if errors:
        console.print("[red]Validation failed:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise typer.Exit(1)

    console.print(f"[green]Validated {len(loader.reports)} reports successfully![/green]")


@app.command()
def fetch(
    name: Annotated[str, typer.Argument(help="Report name")],
    config_path: ConfigOption = Path("./reports"),
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format: table, json, csv")
    ] = "table",
    db_path: Annotated[
        str | None, typer.Option("--db", help="Write rows to this DuckDB file")
    ] = None,
    table_name: Annotated[
        str | None, typer.Option("--table", help="DuckDB table name (defaults to report name)")
    ] = None,
    timeout: Annotated[
        float | None, typer.Option("--timeout", "-t", help="Give up after this many seconds")
    ] = None,
) -> None:
    """Fetch a report and print (or store) its rows."""
    loader = _load_or_exit(config_path)
    report = _get_report_or_exit(loader, name)

    try:
        with get_step(report) as step:
            result = step.fetch(timeout=timeout)
    except ReportflowError as e:
        console.print(f"[red]Fetch error: {e}[/red]")
        raise typer.Exit(1)

    if db_path:
        with DuckDBSink(db_path) as sink:
            count = sink.write(table_name or name, result.header, result.rows, result.metric_count)
        console.print(f"[green]Wrote {count} rows to {table_name or name} in {db_path}[/green]")
        return

    _output_result(result, output)


@app.command()
def fields(
    name: Annotated[str, typer.Argument(help="Report name")],
    config_path: ConfigOption = Path("./reports"),
) -> None:
    """Show the columns a report produces."""
    loader = _load_or_exit(config_path)
    report = _get_report_or_exit(loader, name)

    try:
        with get_step(report) as step:
            columns = step.discover_fields()
    except ReportflowError as e:
        console.print(f"[red]Error discovering fields: {e}[/red]")
        raise typer.Exit(1)

    for column in columns:
        console.print(column)


@app.command("test-connection")
def test_connection() -> None:
    """Check credentials against the reporting service."""
    try:
        get_client().test_connection()
    except ReportflowError as e:
        console.print(f"[red]Connection failed: {e}[/red]")
        raise typer.Exit(1)

    console.print("[green]Connection successful[/green]")


def _output_result(result: ReportResult, output_format: str) -> None:
    """Output fetched rows in the specified format."""
    if output_format == "json":
        # plain echo - rich would treat [..] in the payload as markup
        typer.echo(json.dumps(result.as_dicts(), indent=2, default=str))
    elif output_format == "csv":
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(result.header)
        writer.writerows(result.rows)
        typer.echo(buf.getvalue(), nl=False)
    else:
        table = Table(title=f"Report Rows ({result.row_count} rows, {result.fetch_time_ms}ms)")
        for col in result.header:
            table.add_column(col)

        for row in result.rows:
            table.add_row(*["" if v is None else str(v) for v in row])

        console.print(table)


if __name__ == "__main__":
    app()
