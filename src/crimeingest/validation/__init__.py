"""
Validation layer: row coercion, chunked pipeline and reporting.
"""

from crimeingest.validation.coercion import RowCoercer
from crimeingest.validation.pipeline import (
    ProgressCallback,
    ValidationPipeline,
    validate_file,
    validate_file_async,
    validate_rows,
)
from crimeingest.validation.reporter import ConsoleReporter, render_report, write_report
from crimeingest.validation.types import (
    BatchResult,
    CoercionNote,
    FieldError,
    ProgressEvent,
    RowOutcome,
    ValidationAggregate,
    ValidationSummary,
)

__all__ = [
    "BatchResult",
    "CoercionNote",
    "ConsoleReporter",
    "FieldError",
    "ProgressCallback",
    "ProgressEvent",
    "RowCoercer",
    "RowOutcome",
    "ValidationAggregate",
    "ValidationPipeline",
    "ValidationSummary",
    "render_report",
    "validate_file",
    "validate_file_async",
    "validate_rows",
    "write_report",
]
