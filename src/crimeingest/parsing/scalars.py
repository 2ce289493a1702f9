"""
Scalar coercers: age, gender, case status, boolean flags and free text.

Each ``parse_*`` returns a tagged outcome; each ``coerce_*`` is total and
substitutes the documented default.
"""

import math
from typing import Any

from crimeingest.parsing.outcomes import ParseOutcome, Parsed, Unparsed, is_missing, is_number
from crimeingest.schemas.record import AGE_MAX, AGE_MIN, CaseStatus, Gender

DEFAULT_AGE = 25

CASE_CLOSED_YES = frozenset({"yes", "true", "1", "closed", "solved"})
CASE_CLOSED_NO = frozenset({"no", "false", "0", "open", "unsolved"})

FLAG_TRUE = frozenset({"yes", "true", "1", "deployed"})
FLAG_FALSE = frozenset({"no", "false", "0"})


def clamp_age(value: float) -> int:
    """Round half up and clamp into [AGE_MIN, AGE_MAX]."""
    if not math.isfinite(value):
        return AGE_MAX if value > 0 else AGE_MIN
    rounded = math.floor(value + 0.5)
    return max(AGE_MIN, min(AGE_MAX, rounded))


def parse_age(value: Any) -> ParseOutcome[int]:
    """Numbers and numeric strings, rounded and clamped."""
    if is_missing(value):
        return Unparsed(value, "missing")

    if is_number(value):
        return Parsed(clamp_age(float(value)), "numeric")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return Unparsed(value, "empty")
        try:
            number = float(text)
        except ValueError:
            return Unparsed(value, f"not a number {text!r}", ("numeric-string",))
        if math.isnan(number):
            return Unparsed(value, f"not a number {text!r}", ("numeric-string",))
        return Parsed(clamp_age(number), "numeric-string")

    return Unparsed(value, f"unsupported type {type(value).__name__}")


def coerce_age(value: Any) -> int:
    """Total age coercion: unparseable values become ``DEFAULT_AGE``."""
    outcome = parse_age(value)
    return outcome.value if isinstance(outcome, Parsed) else DEFAULT_AGE


def parse_gender(value: Any) -> ParseOutcome[Gender]:
    """
    Substring match, case-insensitive.

    "female" wins over "male" since the former contains the latter.
    """
    if not isinstance(value, str):
        return Unparsed(value, "missing" if is_missing(value) else "not text")

    text = value.strip().lower()
    if not text:
        return Unparsed(value, "empty")
    if "female" in text:
        return Parsed(Gender.FEMALE, "contains")
    if "male" in text:
        return Parsed(Gender.MALE, "contains")
    if text == "f":
        return Parsed(Gender.FEMALE, "letter")
    if text == "m":
        return Parsed(Gender.MALE, "letter")
    if text == "other":
        return Parsed(Gender.OTHER, "literal")
    return Unparsed(value, f"unrecognized gender {value!r}", ("contains", "letter", "literal"))


def coerce_gender(value: Any) -> Gender:
    """Total gender coercion: anything unrecognized is ``Gender.OTHER``."""
    outcome = parse_gender(value)
    return outcome.value if isinstance(outcome, Parsed) else Gender.OTHER


def parse_case_status(value: Any) -> ParseOutcome[CaseStatus]:
    """Booleans, positive numbers and the closed/open vocabularies."""
    if is_missing(value):
        return Unparsed(value, "missing")

    if isinstance(value, bool):
        return Parsed(CaseStatus.YES if value else CaseStatus.NO, "boolean")

    if is_number(value):
        return Parsed(CaseStatus.YES if value > 0 else CaseStatus.NO, "numeric")

    if isinstance(value, str):
        text = value.strip().lower()
        if not text:
            return Unparsed(value, "empty")
        if text in CASE_CLOSED_YES:
            return Parsed(CaseStatus.YES, "vocabulary")
        if text in CASE_CLOSED_NO:
            return Parsed(CaseStatus.NO, "vocabulary")
        return Unparsed(value, f"unrecognized case status {value!r}", ("vocabulary",))

    return Unparsed(value, f"unsupported type {type(value).__name__}")


def coerce_case_status(value: Any) -> CaseStatus:
    """Total case status coercion: anything unrecognized is ``CaseStatus.NO``."""
    outcome = parse_case_status(value)
    return outcome.value if isinstance(outcome, Parsed) else CaseStatus.NO


def parse_flag(value: Any) -> ParseOutcome[bool]:
    """Booleans, positive numbers and the yes/no vocabularies."""
    if is_missing(value):
        return Unparsed(value, "missing")

    if isinstance(value, bool):
        return Parsed(value, "boolean")

    if is_number(value):
        return Parsed(bool(value > 0), "numeric")

    if isinstance(value, str):
        text = value.strip().lower()
        if not text:
            return Unparsed(value, "empty")
        if text in FLAG_TRUE:
            return Parsed(True, "vocabulary")
        if text in FLAG_FALSE:
            return Parsed(False, "vocabulary")
        return Unparsed(value, f"unrecognized flag {value!r}", ("vocabulary",))

    return Unparsed(value, f"unsupported type {type(value).__name__}")


def coerce_flag(value: Any) -> bool:
    """Total boolean coercion: anything unrecognized is False."""
    outcome = parse_flag(value)
    return outcome.value if isinstance(outcome, Parsed) else False


def coerce_text(value: Any, *, trim: bool = True) -> str | None:
    """
    Text passthrough.

    Returns None for missing or blank cells so the caller can substitute the
    field-specific default. Integral floats from spreadsheets lose their
    ``.0`` suffix.
    """
    if is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    if not text.strip():
        return None
    return text.strip() if trim else text
