"""
Ingestion layer: admission checks, preview sampling and raw readers.

Nothing here interprets cell values; that is the job of the coercion engine.
"""

from crimeingest.ingestion.admission import (
    AdmissionResult,
    FileDescriptor,
    check_admission,
    ensure_admitted,
)
from crimeingest.ingestion.preview import PreviewData, estimate_seconds, preview_file
from crimeingest.ingestion.readers import RawTable, read_delimited, table_from_rows

__all__ = [
    "AdmissionResult",
    "FileDescriptor",
    "PreviewData",
    "RawTable",
    "check_admission",
    "ensure_admitted",
    "estimate_seconds",
    "preview_file",
    "read_delimited",
    "table_from_rows",
]
