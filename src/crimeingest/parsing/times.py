"""
Time-of-day parsing into ``HH:MM`` strings.

Numbers (and numeric strings) in [0, 1) are fractions of a day. Other
strings first have an embedded ``H:MM[:SS][AM/PM]`` token pulled out of
longer text (e.g. a full timestamp), then run through ``TIME_PATTERNS`` in
order. A pattern whose minutes or seconds reach 60, or whose hour reaches
24 after meridiem arithmetic, does not match and the next one is tried.
"""

import math
import re
from datetime import datetime, time
from typing import Any

from crimeingest.parsing.outcomes import ParseOutcome, Parsed, Unparsed, is_missing, is_number

DEFAULT_TIME = "12:00"
MINUTES_PER_DAY = 24 * 60

TIME_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("HH:MM[:SS]", re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")),
    ("h:MM[:SS] AM/PM", re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])$")),
    ("HH.MM[.SS] [AM/PM]", re.compile(r"^(\d{1,2})\.(\d{2})(?:\.(\d{2}))?(?:\s*([AaPp][Mm]))?$")),
    ("HHMM[SS] [AM/PM]", re.compile(r"^(\d{1,2})(\d{2})(\d{2})?(?:\s*([AaPp][Mm]))?$")),
)

_EMBEDDED_TIME = re.compile(r"(?<!\d)(\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AaPp][Mm])?)(?!\d)")


def format_hhmm(hours: int, minutes: int) -> str:
    """Zero-padded 24-hour ``HH:MM``."""
    return f"{hours:02d}:{minutes:02d}"


def fraction_to_hhmm(fraction: float) -> str:
    """Convert a fraction of a day in [0, 1) to ``HH:MM``, rounded to the minute."""
    # fractions just below 1 would round up to 24:00
    total_minutes = min(math.floor(fraction * MINUTES_PER_DAY + 0.5), MINUTES_PER_DAY - 1)
    return format_hhmm(total_minutes // 60, total_minutes % 60)


def _match_patterns(text: str) -> tuple[str, str] | None:
    """Return (hh:mm, pattern name) for the first pattern that fits."""
    for name, pattern in TIME_PATTERNS:
        match = pattern.match(text)
        if match is None:
            continue

        # patterns without a meridiem group have three groups
        groups = match.groups() + (None,) * (4 - pattern.groups)
        hours = int(groups[0])
        minutes = int(groups[1])
        seconds = int(groups[2]) if groups[2] else 0
        meridiem = groups[3].lower() if groups[3] else None

        if minutes >= 60 or seconds >= 60:
            continue

        if meridiem == "pm" and hours != 12:
            hours += 12
        elif meridiem == "am" and hours == 12:
            hours = 0

        if hours >= 24:
            continue

        return format_hhmm(hours, minutes), name
    return None


def _as_fraction(text: str) -> float | None:
    try:
        number = float(text)
    except ValueError:
        return None
    if 0 <= number < 1:
        return number
    return None


def _parse_time_string(text: str) -> ParseOutcome[str]:
    attempts: list[str] = ["day-fraction"]
    fraction = _as_fraction(text)
    if fraction is not None:
        return Parsed(fraction_to_hhmm(fraction), "day-fraction")

    attempts.append("embedded")
    embedded = _EMBEDDED_TIME.search(text)
    if embedded is not None and embedded.group(1) != text:
        found = _match_patterns(embedded.group(1))
        if found is not None:
            return Parsed(found[0], f"embedded {found[1]}")

    attempts.extend(name for name, _ in TIME_PATTERNS)
    found = _match_patterns(text)
    if found is not None:
        return Parsed(found[0], found[1])

    return Unparsed(text, f"unrecognized time {text!r}", tuple(attempts))


def parse_time(value: Any) -> ParseOutcome[str]:
    """
    Parse a cell into a 24-hour ``HH:MM`` string.

    Args:
        value: Raw cell value of any type.

    Returns:
        Parsed time with the matching method, or Unparsed.
    """
    if is_missing(value):
        return Unparsed(value, "missing")

    if isinstance(value, (datetime, time)):
        return Parsed(format_hhmm(value.hour, value.minute), "timestamp")

    if is_number(value):
        number = float(value)
        if 0 <= number < 1:
            return Parsed(fraction_to_hhmm(number), "day-fraction")
        if not math.isfinite(number):
            return Unparsed(value, f"non-finite time {value!r}", ("day-fraction",))
        # 1430 and 1430.0 both read as HHMM
        text = str(int(number)) if number.is_integer() else str(value)
        return _parse_time_string(text)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return Unparsed(value, "empty")
        return _parse_time_string(text)

    return Unparsed(value, f"unsupported type {type(value).__name__}")


def coerce_time(value: Any) -> str:
    """Total time coercion: unparseable values become ``DEFAULT_TIME``."""
    outcome = parse_time(value)
    if isinstance(outcome, Parsed):
        return outcome.value
    return DEFAULT_TIME
