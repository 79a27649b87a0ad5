from __future__ import annotations

from enum import StrEnum
from pathlib import Path
import sys

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.table import Table
import typer

from olist_reports.adapters.db.facade import DB
from olist_reports.adapters.olist.csv_loader import OlistCSVLoader
from olist_reports.core.config import (
    ConfigError,
    ReportsConfig,
    load_reports_config_from_env,
)
from olist_reports.reports.errors import ReportError
from olist_reports.reports.export import result_to_records, write_csv, write_json
from olist_reports.reports.integrity import IntegrityPolicy
from olist_reports.reports.logger import ReportLogger
from olist_reports.reports.queries import ReportName
from olist_reports.reports.runner import ReportRun, ReportRunner
from olist_reports.reports.windows import resolve_reference_date

# Load environment variables from .env
load_dotenv()

app = typer.Typer(
    help="olist-reports: Customer Experience dashboard reports.",
    no_args_is_help=True,
)


class OutputFormat(StrEnum):
    TABLE = "table"
    CSV = "csv"
    JSON = "json"


def _stderr_sink(message: str) -> None:
    sys.stderr.write(message)


def _load_config() -> ReportsConfig:
    try:
        return load_reports_config_from_env()
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2) from e


def _setup_logging(level: str) -> None:
    logger.remove()
    logger.add(
        _stderr_sink, level=level, format="{time:HH:mm:ss} | {level} | {message}"
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs"),
) -> None:
    """Configure logging before any command runs."""
    config = _load_config()
    _setup_logging("DEBUG" if verbose else config.log_level)


@app.command("load")
def load_cmd(
    csv_dir: Path = typer.Argument(..., help="Directory with the Olist CSV files"),
    database_url: str | None = typer.Option(
        None, help="Target database URL (defaults to OLIST_REPORTS_DATABASE_URL)"
    ),
) -> None:
    """Create the schema and load the Olist CSV files into a database."""
    config = _load_config()
    db = DB(database_url or config.database_url)
    try:
        summary = OlistCSVLoader(csv_dir).load_into(db)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    ReportLogger().dataset_loaded(summary.as_counts())
    typer.echo(
        ", ".join(f"{name}: {count}" for name, count in summary.as_counts().items())
    )


@app.command("run")
def run_cmd(
    report: list[ReportName] | None = typer.Option(  # noqa: B008
        None, "--report", "-r", help="Report to run (repeatable, default: all)"
    ),
    database_url: str | None = typer.Option(
        None, help="Database URL (defaults to OLIST_REPORTS_DATABASE_URL)"
    ),
    csv_dir: Path | None = typer.Option(
        None, help="Load Olist CSV files into an in-memory database first"
    ),
    output_dir: Path = typer.Option(  # noqa: B008
        Path("reports"), help="Directory for csv/json output"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TABLE, "--format", "-f", help="Output format"
    ),
    integrity: IntegrityPolicy | None = typer.Option(
        None, help="Orphan row policy (defaults to OLIST_REPORTS_INTEGRITY_POLICY)"
    ),
) -> None:
    """Run the dashboard reports against one dataset snapshot."""
    config = _load_config()
    db = _open_db(config, database_url, csv_dir)
    runner = ReportRunner(db, integrity_policy=integrity or config.integrity_policy)

    try:
        run = runner.run(report or None)
    except ReportError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    if output_format is OutputFormat.TABLE:
        _print_tables(run)
    elif output_format is OutputFormat.CSV:
        report_logger = ReportLogger()
        for result in run.results:
            path = write_csv(result, output_dir / f"{result.name.value}.csv")
            report_logger.export_written(result.name.value, str(path))
            typer.echo(str(path))
    else:
        path = write_json(run, output_dir / "reports.json")
        ReportLogger().export_written("all", str(path))
        typer.echo(str(path))


@app.command("reference-date")
def reference_date_cmd(
    database_url: str | None = typer.Option(
        None, help="Database URL (defaults to OLIST_REPORTS_DATABASE_URL)"
    ),
) -> None:
    """Print the latest purchase timestamp, the anchor of every report window."""
    config = _load_config()
    db = DB(database_url or config.database_url)
    try:
        reference_date = resolve_reference_date(db)
    except ReportError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    typer.echo(reference_date.isoformat(sep=" "))


def _open_db(
    config: ReportsConfig, database_url: str | None, csv_dir: Path | None
) -> DB:
    if csv_dir is None:
        return DB(database_url or config.database_url)

    db = DB("sqlite://")
    try:
        summary = OlistCSVLoader(csv_dir).load_into(db)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    ReportLogger().dataset_loaded(summary.as_counts())
    return db


def _print_tables(run: ReportRun) -> None:
    console = Console()
    console.print(f"Reference date: {run.reference_date.isoformat(sep=' ')}")
    for result in run.results:
        table = Table(title=result.name.value, show_header=True)
        for column in result.columns:
            table.add_column(column)
        for record in result_to_records(result):
            table.add_row(*(str(record[column]) for column in result.columns))
        console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
