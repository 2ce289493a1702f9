"""
Tagged parse results shared by all field parsers.

A parser never raises on bad input. It reports either what it produced and
which method produced it, or why it gave up and which methods it tried.
"""

import numbers
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

import pandas as pd

T = TypeVar("T")


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """Successful parse."""

    value: T
    method: str


@dataclass(frozen=True)
class Unparsed:
    """Failed parse with the attempted parse path."""

    raw: Any
    reason: str
    attempts: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        """True when the raw value was absent rather than malformed."""
        return is_missing(self.raw) or (isinstance(self.raw, str) and not self.raw.strip())


ParseOutcome = Union[Parsed[T], Unparsed]


def is_missing(value: Any) -> bool:
    """None, NaN, NaT and pd.NA count as missing."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, bool)):
        return False
    return bool(pd.api.types.is_scalar(value) and pd.isna(value))


def is_number(value: Any) -> bool:
    """Real numbers, excluding booleans and missing markers."""
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and not is_missing(value)
    )
