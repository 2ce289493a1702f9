"""
Result and event types produced by the validation pipeline.

Field errors are data: they are collected per row and reported, never
raised.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from crimeingest.schemas.record import CrimeRecord


@dataclass(frozen=True)
class FieldError:
    """One violated constraint or parse failure in one row."""

    row_index: int
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class CoercionNote:
    """A value that could not be parsed and was replaced by its default."""

    field: str
    raw: Any
    reason: str
    attempts: tuple[str, ...] = ()


@dataclass
class RowOutcome:
    """
    Result of coercing one raw row.

    Exactly one of ``record`` and ``errors`` is populated.
    """

    row_index: int
    raw: dict[str, Any]
    record: CrimeRecord | None = None
    errors: list[FieldError] = field(default_factory=list)
    notes: list[CoercionNote] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.record is not None and not self.errors


@dataclass(frozen=True)
class ValidationSummary:
    """Row counts of one validation run."""

    total_rows: int
    valid_rows: int
    invalid_rows: int

    @property
    def error_rate(self) -> float:
        """Invalid rows as a percentage of all rows, two decimals."""
        if self.total_rows == 0:
            return 0.0
        return round(self.invalid_rows / self.total_rows * 100, 2)


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification; the percentage is clamped to [0, 100]."""

    percent_complete: float
    stage: str

    def __post_init__(self) -> None:
        clamped = min(100.0, max(0.0, float(self.percent_complete)))
        object.__setattr__(self, "percent_complete", clamped)


@dataclass(frozen=True)
class BatchResult:
    """Outcomes of one batch plus the running position in the file."""

    start_index: int
    outcomes: list[RowOutcome]
    rows_processed: int
    total_rows: int

    @property
    def accepted(self) -> list[RowOutcome]:
        return [o for o in self.outcomes if o.accepted]

    @property
    def rejected(self) -> list[RowOutcome]:
        return [o for o in self.outcomes if not o.accepted]


@dataclass
class ValidationAggregate:
    """
    Complete result of validating one input.

    Accepted records and rejected rows are both kept in input row order.
    ``valid_row_indices[i]`` is the input row index of ``valid_records[i]``.
    """

    valid_records: list[CrimeRecord] = field(default_factory=list)
    valid_row_indices: list[int] = field(default_factory=list)
    invalid_rows: list[RowOutcome] = field(default_factory=list)
    header_warnings: list[str] = field(default_factory=list)
    defaulted_fields: Counter[str] = field(default_factory=Counter)
    total_rows: int = 0

    def add_batch(self, batch: BatchResult) -> None:
        """Append a batch's outcomes, preserving order."""
        for outcome in batch.outcomes:
            self.total_rows += 1
            if outcome.record is not None and not outcome.errors:
                self.valid_records.append(outcome.record)
                self.valid_row_indices.append(outcome.row_index)
                self.defaulted_fields.update(note.field for note in outcome.notes)
            else:
                self.invalid_rows.append(outcome)

    @property
    def summary(self) -> ValidationSummary:
        return ValidationSummary(
            total_rows=self.total_rows,
            valid_rows=len(self.valid_records),
            invalid_rows=len(self.invalid_rows),
        )
