"""
Calendar date parsing for loosely typed cells.

Resolution order for a single value:

1. Structured timestamps (``datetime``, ``date``, ``pd.Timestamp``) pass through.
2. Numbers are spreadsheet serial days (day 0 = 1899-12-31, with the
   historical phantom 1900-02-29 at serial 60).
3. Strings try strict ISO 8601, then the free-form dateutil parser, then
   the explicit ``DATE_FORMATS`` in order. The free-form step is skipped
   for bare numerals and for text without digits, and its results before
   ``MIN_FREE_FORM_YEAR`` are discarded, so "5", "1430" or "March" do not
   become dates.

Ambiguous slash dates such as ``05/03/2024`` therefore resolve month-first
(the free-form parser's reading); ``15/01/2024`` cannot be month-first and
resolves to 15 January. All results are naive datetimes; aware inputs are
converted to UTC first.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from dateutil import parser as dateutil_parser

from crimeingest.parsing.outcomes import ParseOutcome, Parsed, Unparsed, is_missing, is_number

# Serial day 0. Serial 60 is 1900-02-29, a day that never existed, so
# every serial from 60 on is shifted back by one.
SERIAL_EPOCH = datetime(1899, 12, 31)
SERIAL_PHANTOM_LEAP_DAY = 60

_BASE_FORMATS = (
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%Y-%m-%d",
    "%Y/%m/%d",
)

DATE_FORMATS: tuple[str, ...] = tuple(
    f"{base}{suffix}" for suffix in ("", " %H:%M", " %H:%M:%S") for base in _BASE_FORMATS
)

# Free-form results before this year are misread codes or times
MIN_FREE_FORM_YEAR = 1900

# Literal strings that mean "no value" for optional dates
ABSENT_MARKERS = frozenset({"", "null", "undefined"})


def _naive(dt: datetime) -> datetime:
    """Drop timezone information after converting to UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def serial_to_datetime(serial: float) -> datetime:
    """
    Convert a spreadsheet serial day number to a datetime.

    The fractional part is the time of day.

    Raises:
        OverflowError: If the result is outside the representable range.
    """
    days = serial if serial < SERIAL_PHANTOM_LEAP_DAY else serial - 1
    return SERIAL_EPOCH + timedelta(days=days)


def _looks_like_free_form_date(text: str) -> bool:
    """Bare numerals and digit-free words are never free-form dates."""
    return any(ch.isdigit() for ch in text) and not text.isdigit()


def _parse_date_string(text: str, reference: datetime) -> ParseOutcome[datetime]:
    attempts: list[str] = []

    attempts.append("iso")
    try:
        return Parsed(_naive(datetime.fromisoformat(text)), "iso")
    except ValueError:
        pass

    attempts.append("free-form")
    if _looks_like_free_form_date(text):
        try:
            default = datetime.combine(reference.date(), time.min)
            parsed = _naive(dateutil_parser.parse(text, default=default))
        except (ValueError, OverflowError):
            pass
        else:
            if parsed.year >= MIN_FREE_FORM_YEAR:
                return Parsed(parsed, "free-form")

    for fmt in DATE_FORMATS:
        attempts.append(fmt)
        try:
            return Parsed(datetime.strptime(text, fmt), fmt)
        except ValueError:
            continue

    return Unparsed(text, f"unrecognized date {text!r}", tuple(attempts))


def parse_date(value: Any, *, reference: datetime | None = None) -> ParseOutcome[datetime]:
    """
    Parse a cell into a naive datetime.

    Args:
        value: Raw cell value of any type.
        reference: Supplies missing components for partial free-form dates
            (defaults to now).

    Returns:
        Parsed datetime with the method that matched, or Unparsed.
    """
    if is_missing(value):
        return Unparsed(value, "missing")

    if isinstance(value, datetime):
        # pd.Timestamp is a datetime subclass
        if hasattr(value, "to_pydatetime"):
            value = value.to_pydatetime()
        return Parsed(_naive(value), "timestamp")

    if isinstance(value, date):
        return Parsed(datetime.combine(value, time.min), "date")

    if is_number(value):
        try:
            return Parsed(serial_to_datetime(float(value)), "serial")
        except (OverflowError, ValueError):
            return Unparsed(value, f"serial day {value!r} out of range", ("serial",))

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return Unparsed(value, "empty")
        return _parse_date_string(text, reference or datetime.now())

    return Unparsed(value, f"unsupported type {type(value).__name__}")


def parse_optional_date(value: Any) -> ParseOutcome[datetime | None]:
    """
    Parse a cell whose absence is meaningful.

    Missing cells and the literal markers in ``ABSENT_MARKERS`` yield
    ``Parsed(None, "absent")`` instead of a failure.
    """
    if is_missing(value):
        return Parsed(None, "absent")
    if isinstance(value, str) and value.strip().lower() in ABSENT_MARKERS:
        return Parsed(None, "absent")
    return parse_date(value)


def coerce_date(value: Any, *, now: datetime | None = None) -> datetime:
    """Total date coercion: unparseable values become ``now``."""
    now = now or datetime.now()
    outcome = parse_date(value, reference=now)
    if isinstance(outcome, Parsed):
        return outcome.value
    return now


def coerce_optional_date(value: Any) -> datetime | None:
    """Total optional date coercion: anything unparseable is absent."""
    outcome = parse_optional_date(value)
    if isinstance(outcome, Parsed):
        return outcome.value
    return None
