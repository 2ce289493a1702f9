"""
Chunked validation pipeline.

Reads an input into raw rows, reconciles its headers once, then coerces the
rows in fixed-size batches. ``iter_batches`` is the core: a lazy sequence
of batch results whose every ``yield`` is a point where the caller regains
control. Progress events are derived from those batches, and the
aggregate keeps accepted and rejected rows in input order.
"""

import asyncio
from collections.abc import Callable, Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from crimeingest.config.settings import IngestConfig
from crimeingest.errors import HeaderError
from crimeingest.ingestion.admission import FileDescriptor, ensure_admitted
from crimeingest.ingestion.readers import RawTable, read_delimited, table_from_rows
from crimeingest.normalization.columns import (
    ColumnMapping,
    build_column_mapping,
    missing_required_columns,
    validate_headers,
)
from crimeingest.utils.logging import get_logger, log_context
from crimeingest.validation.coercion import RowCoercer
from crimeingest.validation.types import BatchResult, ProgressEvent, ValidationAggregate

log = get_logger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]

# Fixed progress milestones; row processing spans PROCESSING_START..PROCESSING_END
PARSED = 25.0
HEADERS_CHECKED = 35.0
MAPPING_BUILT = 45.0
PROCESSING_START = 50.0
PROCESSING_END = 95.0


class ValidationPipeline:
    """
    Validates crime incident inputs against the canonical record schema.

    One instance can validate any number of inputs; no state is kept
    between runs.
    """

    def __init__(self, config: IngestConfig | None = None) -> None:
        """
        Initialize validation pipeline.

        Args:
            config: Limits and policies, defaults when None.
        """
        self.config = config or IngestConfig()

    def iter_batches(self, table: RawTable, mapping: ColumnMapping) -> Iterator[BatchResult]:
        """
        Coerce a table's rows batch by batch.

        Args:
            table: Raw rows to coerce.
            mapping: Column mapping built from the table's headers.

        Yields:
            One BatchResult per ``batch_size`` rows, in input order.
        """
        coercer = RowCoercer(mapping, self.config)
        total = len(table.rows)
        size = self.config.batch_size

        for start in range(0, total, size):
            chunk = table.rows[start : start + size]
            outcomes = [coercer.coerce(row, start + offset) for offset, row in enumerate(chunk)]
            yield BatchResult(
                start_index=start,
                outcomes=outcomes,
                rows_processed=start + len(chunk),
                total_rows=total,
            )

    def reconcile(self, table: RawTable) -> tuple[ColumnMapping, list[str]]:
        """
        Build the column mapping and check required headers.

        Returns:
            The mapping and one warning per missing required column.

        Raises:
            HeaderError: If required columns are missing and strict headers
                are enabled.
        """
        mapping = build_column_mapping(table.headers)
        messages = validate_headers(mapping, self.config.required_columns)

        if messages and self.config.strict_headers:
            missing = missing_required_columns(mapping, self.config.required_columns)
            log.error("Header validation failed", missing=missing)
            raise HeaderError(messages, missing)

        return mapping, messages

    def events(self, table: RawTable, aggregate: ValidationAggregate) -> Iterator[ProgressEvent]:
        """
        Validate a table into ``aggregate``, yielding progress as it goes.

        The aggregate is complete once the generator is exhausted.
        """
        yield ProgressEvent(PARSED, "Parsing completed, validating data...")

        yield ProgressEvent(HEADERS_CHECKED, "Validating column headers...")
        mapping, warnings = self.reconcile(table)
        aggregate.header_warnings.extend(warnings)

        yield ProgressEvent(MAPPING_BUILT, "Creating column mapping...")
        yield ProgressEvent(PROCESSING_START, "Processing data rows...")

        for batch in self.iter_batches(table, mapping):
            aggregate.add_batch(batch)
            share = batch.rows_processed / batch.total_rows
            yield ProgressEvent(
                PROCESSING_START + share * (PROCESSING_END - PROCESSING_START),
                f"Processing rows {batch.start_index + 1}-{batch.rows_processed} "
                f"of {batch.total_rows}...",
            )

        summary = aggregate.summary
        log.info(
            "Validation complete",
            total=summary.total_rows,
            valid=summary.valid_rows,
            invalid=summary.invalid_rows,
            error_rate=summary.error_rate,
            defaulted=dict(aggregate.defaulted_fields),
        )
        yield ProgressEvent(100.0, "Processing complete!")

    def validate(
        self,
        table: RawTable,
        progress: ProgressCallback | None = None,
    ) -> ValidationAggregate:
        """
        Validate an already read table.

        Args:
            table: Raw rows with their header row.
            progress: Optional callback receiving progress events.

        Returns:
            ValidationAggregate with records, rejected rows and summary.
        """
        aggregate = ValidationAggregate()
        relay = _ProgressRelay(progress)
        for event in self.events(table, aggregate):
            relay(event)
        return aggregate

    def validate_file(
        self,
        path: Path,
        progress: ProgressCallback | None = None,
        *,
        media_type: str | None = None,
    ) -> ValidationAggregate:
        """
        Admit, read and validate a delimited file.

        Args:
            path: File to validate.
            progress: Optional callback receiving progress events.
            media_type: Declared media type; guessed from the name if None.

        Returns:
            ValidationAggregate for the file.

        Raises:
            AdmissionError: If the file fails admission.
            StructuralError: If the file cannot be parsed or has too many rows.
            HeaderError: If strict headers are enabled and columns are missing.
        """
        with log_context(file=path.name):
            self._admit(path, progress, media_type)
            table = read_delimited(path, self.config)
            return self.validate(table, progress)

    def validate_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        progress: ProgressCallback | None = None,
    ) -> ValidationAggregate:
        """
        Validate already decoded rows, e.g. from a spreadsheet decoder.

        Values may be text, numbers, booleans, datetimes or None.

        Raises:
            StructuralError: If there are more rows than ``max_rows``.
            HeaderError: If strict headers are enabled and columns are missing.
        """
        relay = _ProgressRelay(progress)
        relay(ProgressEvent(0.0, "Initializing row processing..."))
        table = table_from_rows(rows, self.config)
        return self.validate(table, relay)

    async def validate_file_async(
        self,
        path: Path,
        progress: ProgressCallback | None = None,
        *,
        media_type: str | None = None,
    ) -> ValidationAggregate:
        """
        Like ``validate_file``, but reads the file in a worker thread and
        returns control to the event loop after every progress event so a
        host loop stays responsive.
        """
        with log_context(file=path.name):
            relay = _ProgressRelay(progress)
            self._admit(path, relay, media_type)
            table = await asyncio.to_thread(read_delimited, path, self.config)

            aggregate = ValidationAggregate()
            for event in self.events(table, aggregate):
                relay(event)
                await asyncio.sleep(0)
            return aggregate

    def _admit(
        self,
        path: Path,
        progress: ProgressCallback | None,
        media_type: str | None,
    ) -> None:
        descriptor = FileDescriptor.from_path(path, media_type)
        ensure_admitted(descriptor, self.config)

        if progress is not None:
            progress(ProgressEvent(0.0, "Initializing file processing..."))

        log.info("Processing file", size=descriptor.size)


class _ProgressRelay:
    """Forwards events to a callback, never letting the percentage go back."""

    def __init__(self, callback: ProgressCallback | None) -> None:
        self.callback = callback
        self.last = 0.0

    def __call__(self, event: ProgressEvent) -> None:
        if self.callback is None:
            return
        if event.percent_complete < self.last:
            event = ProgressEvent(self.last, event.stage)
        self.last = event.percent_complete
        self.callback(event)


def validate_file(
    path: Path,
    config: IngestConfig | None = None,
    progress: ProgressCallback | None = None,
) -> ValidationAggregate:
    """Validate a delimited file with a one-off pipeline."""
    return ValidationPipeline(config).validate_file(path, progress)


def validate_rows(
    rows: Iterable[Mapping[str, Any]],
    config: IngestConfig | None = None,
    progress: ProgressCallback | None = None,
) -> ValidationAggregate:
    """Validate decoded rows with a one-off pipeline."""
    return ValidationPipeline(config).validate_rows(rows, progress)


async def validate_file_async(
    path: Path,
    config: IngestConfig | None = None,
    progress: ProgressCallback | None = None,
) -> ValidationAggregate:
    """Validate a delimited file, yielding to the event loop between batches."""
    return await ValidationPipeline(config).validate_file_async(path, progress)
