"""
Validation reports.

``render_report`` produces the plain-text report that can be saved next to
the input; ``ConsoleReporter`` formats the same aggregate using Rich for
the command line.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from crimeingest.utils.logging import get_logger
from crimeingest.validation.types import RowOutcome, ValidationAggregate

log = get_logger(__name__)

REPORT_TITLE = "Crime Data Validation Report"
MAX_REPORTED_ROWS = 100
DEFAULT_REPORT_NAME = "validation-report.txt"


def _serialize_row(outcome: RowOutcome) -> str:
    return json.dumps(outcome.raw, default=str, ensure_ascii=False)


def render_report(
    aggregate: ValidationAggregate,
    *,
    generated_at: datetime | None = None,
    max_rows: int = MAX_REPORTED_ROWS,
) -> str:
    """
    Render an aggregate as a plain-text report.

    Only the first ``max_rows`` rejected rows are itemized (numbered from 1);
    a trailing line counts the rest.

    Args:
        aggregate: Result of a validation run.
        generated_at: Report timestamp, defaults to now (UTC).
        max_rows: Number of rejected rows to itemize.

    Returns:
        Report text, lines separated by ``\\n``.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    summary = aggregate.summary

    lines = [
        REPORT_TITLE,
        "=" * 32,
        f"Generated: {generated_at.isoformat()}",
        "",
        "Summary:",
        f"- Total rows processed: {summary.total_rows}",
        f"- Valid records: {summary.valid_rows}",
        f"- Invalid records: {summary.invalid_rows}",
        f"- Error rate: {summary.error_rate:.2f}%",
        "",
    ]

    if aggregate.header_warnings:
        lines.append("Header Warnings:")
        lines.extend(f"- {warning}" for warning in aggregate.header_warnings)
        lines.append("")

    if aggregate.defaulted_fields:
        lines.append("Defaulted Values:")
        lines.extend(
            f"- {field}: {count}" for field, count in aggregate.defaulted_fields.most_common()
        )
        lines.append("")

    invalid = aggregate.invalid_rows
    if invalid:
        lines.append("Invalid Records:")
        lines.append("-" * 16)

        for outcome in invalid[:max_rows]:
            lines.append(f"Row {outcome.row_index + 1}:")
            lines.extend(f"  - {error}" for error in outcome.errors)
            lines.append(f"  Data: {_serialize_row(outcome)}")
            lines.append("")

        if len(invalid) > max_rows:
            lines.append(f"... and {len(invalid) - max_rows} more invalid records")

    return "\n".join(lines)


def write_report(aggregate: ValidationAggregate, path: Path | None = None) -> Path:
    """
    Write the plain-text report to a file.

    Args:
        aggregate: Result of a validation run.
        path: Target file, ``validation-report.txt`` in the working directory
            by default.

    Returns:
        Path of the written report.
    """
    path = path or Path(DEFAULT_REPORT_NAME)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_report(aggregate), encoding="utf-8")
    log.info("Wrote validation report", path=str(path))
    return path


class ConsoleReporter:
    """Formats and displays validation results to the console."""

    def __init__(self, console: Console, max_rows: int = 10) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
            max_rows: Rejected rows shown in the error table.
        """
        self.console = console
        self.max_rows = max_rows

    def print_results(self, aggregate: ValidationAggregate, title: str = "Validation Results") -> None:
        """
        Print summary, header warnings and the first rejected rows.

        Args:
            aggregate: Result of a validation run.
            title: Title of the summary table.
        """
        self._print_summary(aggregate, title)
        self._print_header_warnings(aggregate)
        self._print_rejected(aggregate)

    def _print_summary(self, aggregate: ValidationAggregate, title: str) -> None:
        summary = aggregate.summary

        table = Table(title=title, show_header=True)
        table.add_column("Metric", style="cyan", no_wrap=True)
        table.add_column("Value", justify="right")

        table.add_row("Total rows", str(summary.total_rows))
        table.add_row("Valid records", f"[green]{summary.valid_rows}[/green]")
        table.add_row("Invalid records", f"[red]{summary.invalid_rows}[/red]")
        table.add_row("Error rate", f"{summary.error_rate:.2f}%")
        for field, count in aggregate.defaulted_fields.most_common():
            table.add_row(f"Defaulted {field}", f"[yellow]{count}[/yellow]")

        self.console.print(table)

    def _print_header_warnings(self, aggregate: ValidationAggregate) -> None:
        if not aggregate.header_warnings:
            return

        self.console.print()
        self.console.print("[bold yellow]Header Warnings:[/bold yellow]")
        for warning in aggregate.header_warnings:
            self.console.print(f"  {warning}", markup=False)

    def _print_rejected(self, aggregate: ValidationAggregate) -> None:
        invalid = aggregate.invalid_rows
        if not invalid:
            return

        table = Table(title="Invalid Records", show_header=True)
        table.add_column("Row", justify="right", style="cyan")
        table.add_column("Errors", style="red")

        for outcome in invalid[: self.max_rows]:
            table.add_row(
                str(outcome.row_index + 1),
                Text("\n".join(str(error) for error in outcome.errors)),
            )

        self.console.print()
        self.console.print(table)

        if len(invalid) > self.max_rows:
            self.console.print(f"[dim]... and {len(invalid) - self.max_rows} more invalid records[/dim]")
