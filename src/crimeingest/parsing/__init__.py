"""
Field parsers for loosely typed cells.

Every parser returns ``Parsed`` or ``Unparsed``; the ``coerce_*`` wrappers
are total and substitute documented defaults.
"""

from crimeingest.parsing.dates import (
    coerce_date,
    coerce_optional_date,
    parse_date,
    parse_optional_date,
    serial_to_datetime,
)
from crimeingest.parsing.outcomes import ParseOutcome, Parsed, Unparsed, is_missing, is_number
from crimeingest.parsing.scalars import (
    DEFAULT_AGE,
    coerce_age,
    coerce_case_status,
    coerce_flag,
    coerce_gender,
    coerce_text,
    parse_age,
    parse_case_status,
    parse_flag,
    parse_gender,
)
from crimeingest.parsing.times import DEFAULT_TIME, coerce_time, parse_time

__all__ = [
    "DEFAULT_AGE",
    "DEFAULT_TIME",
    "ParseOutcome",
    "Parsed",
    "Unparsed",
    "coerce_age",
    "coerce_case_status",
    "coerce_date",
    "coerce_flag",
    "coerce_gender",
    "coerce_optional_date",
    "coerce_text",
    "coerce_time",
    "is_missing",
    "is_number",
    "parse_age",
    "parse_case_status",
    "parse_date",
    "parse_flag",
    "parse_gender",
    "parse_optional_date",
    "parse_time",
    "serial_to_datetime",
]
