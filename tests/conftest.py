"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import structlog

STANDARD_HEADERS = [
    "Report Number",
    "Date Reported",
    "Date of Occurrence",
    "Time of Occurrence",
    "City",
    "Crime Code",
    "Crime Description",
    "Victim Age",
    "Victim Gender",
    "Weapon Used",
    "Crime Domain",
    "Police Deployed",
    "Case Closed",
    "Date Case Closed",
]


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Drop logging configuration left behind by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes rows as a CSV file under tmp_path."""

    def _write(
        headers: list[str],
        rows: list[list[str]],
        name: str = "incidents.csv",
    ) -> Path:
        lines = [",".join(headers)]
        lines.extend(",".join(row) for row in rows)
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def standard_headers() -> list[str]:
    """Display labels of every canonical field."""
    return list(STANDARD_HEADERS)


@pytest.fixture
def standard_row() -> list[str]:
    """One fully populated row matching STANDARD_HEADERS."""
    return [
        "R-1001",
        "16/01/2024",
        "15/01/2024",
        "14:30",
        "Metro",
        "C-100",
        "Theft",
        "30",
        "Male",
        "Knife",
        "Violent Crime",
        "Yes",
        "Yes",
        "20/01/2024",
    ]


@pytest.fixture
def standard_csv(write_csv: Callable[..., Path], standard_row: list[str]) -> Path:
    """CSV with the standard headers and three rows."""
    second = list(standard_row)
    second[0] = "R-1002"
    second[8] = "Female"
    third = list(standard_row)
    third[0] = "R-1003"
    third[12] = "No"
    third[13] = ""
    return write_csv(STANDARD_HEADERS, [standard_row, second, third])


@pytest.fixture
def minimal_headers() -> list[str]:
    """The required columns only."""
    return [
        "Report Number",
        "Date of Occurrence",
        "City",
        "Crime Description",
        "Victim Age",
        "Victim Gender",
    ]
