"""
Row coercion engine.

Turns one raw row into a ``CrimeRecord`` or a list of field errors. Every
field goes through a parser that reports how it parsed the value or why it
could not; failures fall back to the field default and are recorded as
coercion notes (or, with ``strict_coercion``, as field errors).
"""

import uuid
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from crimeingest.config.settings import IngestConfig
from crimeingest.normalization.columns import ColumnMapping
from crimeingest.parsing.dates import parse_date, parse_optional_date
from crimeingest.parsing.outcomes import ParseOutcome, Parsed, Unparsed
from crimeingest.parsing.scalars import (
    DEFAULT_AGE,
    coerce_text,
    parse_age,
    parse_case_status,
    parse_flag,
    parse_gender,
)
from crimeingest.parsing.times import DEFAULT_TIME, parse_time
from crimeingest.schemas.record import CaseStatus, CrimeRecord, Gender
from crimeingest.utils.logging import get_logger
from crimeingest.validation.types import CoercionNote, FieldError, RowOutcome

log = get_logger(__name__)

TEXT_DEFAULTS: dict[str, str] = {
    "city": "Unknown",
    "crime_code": "UNKNOWN",
    "crime_description": "Unknown",
    "weapon_used": "None",
    "crime_domain": "Other",
}


def generate_report_number() -> str:
    """Unique identifier for rows without one."""
    return f"AUTO-{uuid.uuid4().hex[:12].upper()}"


def _error_path(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc) or "row"


class RowCoercer:
    """
    Coerces raw rows of one file into canonical records.

    Holds the file's column mapping so that each row is read through it
    instead of re-inspecting raw keys.
    """

    def __init__(self, mapping: ColumnMapping, config: IngestConfig | None = None) -> None:
        """
        Initialize row coercer.

        Args:
            mapping: Column mapping of the file being processed.
            config: Trimming and coercion policy.
        """
        self.mapping = mapping
        self.config = config or IngestConfig()

    def coerce(self, row: Mapping[str, Any], row_index: int) -> RowOutcome:
        """
        Coerce and validate one row.

        Never raises: unexpected failures become a single ``row`` field error.

        Args:
            row: Raw row keyed by observed header.
            row_index: Zero-based position of the row in the input.

        Returns:
            RowOutcome carrying either the record or the field errors.
        """
        raw = dict(row)
        notes: list[CoercionNote] = []
        errors: list[FieldError] = []

        try:
            candidate = self._build(raw, row_index, notes, errors)
        except Exception as e:
            log.debug("Row coercion failed", row=row_index, error=repr(e))
            message = f"Processing error: {type(e).__name__}: {e}"
            return RowOutcome(row_index, raw, errors=[FieldError(row_index, "row", message)])

        if errors:
            return RowOutcome(row_index, raw, errors=errors, notes=notes)

        try:
            record = CrimeRecord.model_validate(candidate)
        except ValidationError as e:
            errors = [
                FieldError(row_index, _error_path(err["loc"]), err["msg"]) for err in e.errors()
            ]
            return RowOutcome(row_index, raw, errors=errors, notes=notes)

        return RowOutcome(row_index, raw, record=record, notes=notes)

    def _resolve(
        self,
        field: str,
        raw: Any,
        outcome: ParseOutcome[Any],
        default: Any,
        row_index: int,
        notes: list[CoercionNote],
        errors: list[FieldError],
    ) -> Any:
        """Unwrap a parse outcome, falling back to ``default``."""
        if isinstance(outcome, Parsed):
            return outcome.value

        log.debug(
            "Falling back to default",
            row=row_index,
            field=field,
            raw=raw,
            reason=outcome.reason,
            attempts=list(outcome.attempts),
        )
        if outcome.is_empty:
            return default

        if self.config.strict_coercion:
            errors.append(
                FieldError(row_index, field, f"could not parse {raw!r} ({outcome.reason})")
            )
        notes.append(CoercionNote(field, raw, outcome.reason, outcome.attempts))
        return default

    def _field(
        self,
        row: Mapping[str, Any],
        field: str,
        parser: Callable[[Any], ParseOutcome[Any]],
        default: Any,
        row_index: int,
        notes: list[CoercionNote],
        errors: list[FieldError],
    ) -> Any:
        raw = self.mapping.get(row, field)
        return self._resolve(field, raw, parser(raw), default, row_index, notes, errors)

    def _text(self, row: Mapping[str, Any], field: str, default: str) -> str:
        value = coerce_text(self.mapping.get(row, field), trim=self.config.trim_whitespace)
        return default if value is None else value

    def _build(
        self,
        row: Mapping[str, Any],
        row_index: int,
        notes: list[CoercionNote],
        errors: list[FieldError],
    ) -> dict[str, Any]:
        now = datetime.now()

        def field(name: str, parser: Callable[[Any], ParseOutcome[Any]], default: Any) -> Any:
            return self._field(row, name, parser, default, row_index, notes, errors)

        occurred = field("date_of_occurrence", lambda v: parse_date(v, reference=now), now)
        reported = field("date_reported", lambda v: parse_date(v, reference=now), occurred)

        case_closed = field("case_closed", parse_case_status, CaseStatus.NO)
        closed_on = None
        if case_closed is CaseStatus.YES:
            closed_on = field("date_case_closed", parse_optional_date, None)

        report_number = self._text(row, "report_number", "")
        if not report_number:
            report_number = generate_report_number()

        candidate: dict[str, Any] = {
            "report_number": report_number,
            "date_reported": reported,
            "date_of_occurrence": occurred,
            "time_of_occurrence": field("time_of_occurrence", parse_time, DEFAULT_TIME),
            "victim_age": field("victim_age", parse_age, DEFAULT_AGE),
            "victim_gender": field("victim_gender", parse_gender, Gender.OTHER),
            "police_deployed": field("police_deployed", parse_flag, False),
            "case_closed": case_closed,
            "date_case_closed": closed_on,
        }
        for name, default in TEXT_DEFAULTS.items():
            candidate[name] = self._text(row, name, default)

        return candidate
