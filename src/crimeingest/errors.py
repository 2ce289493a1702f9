"""
Error taxonomy for the ingestion pipeline.

Admission, structural and (strict) header errors stop a run and reach the
caller. Field-level problems are data (see ``validation.types.FieldError``)
and never raise.
"""


class IngestError(Exception):
    """Base class for all fatal ingestion errors."""


class AdmissionError(IngestError):
    """File rejected by pre-flight checks before any parsing."""

    def __init__(self, reasons: list[str]) -> None:
        self.reasons = list(reasons)
        super().__init__(f"File validation failed: {', '.join(self.reasons)}")


class StructuralError(IngestError):
    """
    Whole-file failure: unreadable stream, malformed delimited text or a
    row count above the configured ceiling.

    No partial aggregate accompanies this error.
    """

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.message = message
        self.detail = detail
        text = message if detail is None else f"{message} ({detail})"
        super().__init__(text)


class HeaderError(IngestError):
    """Required canonical columns are missing and strict headers are enabled."""

    def __init__(self, messages: list[str], missing: list[str]) -> None:
        self.messages = list(messages)
        self.missing = list(missing)
        super().__init__(f"Header validation failed: {', '.join(self.messages)}")
