"""Command-line interface for the crimeingest pipeline."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from crimeingest.config.settings import IngestConfig

app = typer.Typer(
    name="crimeingest",
    help="Ingest and validate crime incident CSV files.",
    no_args_is_help=True,
)

console = Console()

FileArgument = Annotated[
    Path,
    typer.Argument(
        help="CSV file to process.",
        exists=True,
        dir_okay=False,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]


def _load(config: Path | None) -> "IngestConfig":
    from pydantic import ValidationError

    from crimeingest.config.loader import load_config

    try:
        return load_config(config)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def check(
    file: FileArgument,
    config: ConfigOption = None,
) -> None:
    """Run admission checks and preview the first rows of a file."""
    from crimeingest.errors import StructuralError
    from crimeingest.ingestion import FileDescriptor, check_admission, preview_file

    ingest_config = _load(config)

    result = check_admission(FileDescriptor.from_path(file), ingest_config)
    if not result.valid:
        console.print("[red]File rejected:[/red]")
        for reason in result.errors:
            console.print(f"  - {reason}", markup=False)
        raise typer.Exit(code=1)

    console.print(f"[green]File accepted: {file.name}[/green]")

    try:
        preview = preview_file(file, ingest_config)
    except StructuralError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title=f"Preview: {file.name}", show_header=True)
    for header in preview.headers:
        table.add_column(header, overflow="fold")
    for row in preview.rows:
        table.add_row(*(str(row.get(h, "")) for h in preview.headers))
    console.print(table)

    console.print(f"Estimated rows: {preview.estimated_total_rows}")
    console.print(f"Estimated processing time: {preview.estimated_seconds}s")


@app.command()
def validate(
    file: FileArgument,
    config: ConfigOption = None,
    report: Annotated[
        Path | None,
        typer.Option(
            "--report",
            "-r",
            help="Write the plain-text validation report to this path.",
        ),
    ] = None,
    records: Annotated[
        Path | None,
        typer.Option(
            "--records",
            "-o",
            help="Write accepted records as CSV to this path.",
        ),
    ] = None,
    strict_headers: Annotated[
        bool,
        typer.Option(
            "--strict-headers",
            help="Abort when a required column is missing.",
        ),
    ] = False,
    json_logs: Annotated[
        bool,
        typer.Option(
            "--json-logs",
            help="Emit logs as JSON lines.",
        ),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Log level (DEBUG, INFO, WARNING, ERROR).",
        ),
    ] = "INFO",
) -> None:
    """Validate a file and summarize accepted and rejected rows."""
    from rich.progress import BarColumn, Progress, TextColumn

    from crimeingest.errors import IngestError
    from crimeingest.schemas.frame import records_to_frame
    from crimeingest.utils.logging import configure_logging
    from crimeingest.validation import ConsoleReporter, ValidationPipeline, write_report
    from crimeingest.validation.types import ProgressEvent

    configure_logging(level=log_level, json_output=json_logs)

    ingest_config = _load(config)
    if strict_headers:
        ingest_config = ingest_config.model_copy(update={"strict_headers": True})

    pipeline = ValidationPipeline(ingest_config)

    try:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>5.1f}%"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Validating", total=100)

            def on_progress(event: ProgressEvent) -> None:
                progress.update(task, completed=event.percent_complete, description=event.stage)

            aggregate = pipeline.validate_file(file, on_progress)
    except IngestError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    ConsoleReporter(console).print_results(aggregate, title=f"Validation Results: {file.name}")

    if report is not None:
        path = write_report(aggregate, report)
        console.print(f"\n[green]Report saved to: {path}[/green]")

    if records is not None:
        records.parent.mkdir(parents=True, exist_ok=True)
        records_to_frame(aggregate.valid_records).to_csv(records, index=False)
        console.print(f"[green]Accepted records saved to: {records}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from crimeingest import __version__

    console.print(f"crimeingest version {__version__}")


if __name__ == "__main__":
    app()
