"""
Header reconciliation.

Maps the headers observed in a file onto canonical field names using a
fixed table of accepted spellings. The resulting ``ColumnMapping`` is built
once per file and is read-only afterwards.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from crimeingest.utils.logging import get_logger

log = get_logger(__name__)

# Canonical field -> accepted header spellings. The first spelling is the
# display label; list order is the tie-break when several headers match.
COLUMN_VARIANTS: dict[str, tuple[str, ...]] = {
    "report_number": ("Report Number", "ReportNumber", "report_number", "ID", "Case ID"),
    "date_reported": ("Date Reported", "DateReported", "date_reported", "Report Date"),
    "date_of_occurrence": (
        "Date of Occurrence",
        "DateOfOccurrence",
        "date_of_occurrence",
        "Incident Date",
        "Crime Date",
    ),
    "time_of_occurrence": (
        "Time of Occurrence",
        "TimeOfOccurrence",
        "time_of_occurrence",
        "Incident Time",
        "Crime Time",
    ),
    "city": ("City", "Location", "Municipality"),
    "crime_code": ("Crime Code", "CrimeCode", "crime_code", "Code", "Offense Code"),
    "crime_description": (
        "Crime Description",
        "CrimeDescription",
        "crime_description",
        "Offense",
        "Crime Type",
    ),
    "victim_age": ("Victim Age", "VictimAge", "victim_age", "Age"),
    "victim_gender": ("Victim Gender", "VictimGender", "victim_gender", "Gender", "Sex"),
    "weapon_used": ("Weapon Used", "WeaponUsed", "weapon_used", "Weapon", "Method"),
    "crime_domain": ("Crime Domain", "CrimeDomain", "crime_domain", "Category", "Domain"),
    "police_deployed": ("Police Deployed", "PoliceDeployed", "police_deployed", "Response"),
    "case_closed": ("Case Closed", "CaseClosed", "case_closed", "Status", "Solved"),
    "date_case_closed": (
        "Date Case Closed",
        "DateCaseClosed",
        "date_case_closed",
        "Closure Date",
    ),
}

DEFAULT_REQUIRED_COLUMNS: tuple[str, ...] = (
    "report_number",
    "date_of_occurrence",
    "city",
    "crime_description",
    "victim_age",
    "victim_gender",
)


def display_label(field: str) -> str:
    """Human-readable label for a canonical field."""
    return COLUMN_VARIANTS[field][0]


def _key(header: str) -> str:
    return header.strip().lower()


class ColumnMapping:
    """
    Immutable canonical field -> observed header mapping for one file.

    Fields without a matching header are absent; ``get`` returns None for
    them so the coercer falls back to the field default.
    """

    __slots__ = ("_headers", "_observed")

    def __init__(self, headers: Mapping[str, str], observed: Iterable[str] = ()) -> None:
        self._headers = MappingProxyType(dict(headers))
        self._observed = tuple(observed)

    @property
    def headers(self) -> Mapping[str, str]:
        """Read-only view of canonical field -> observed header."""
        return self._headers

    @property
    def observed(self) -> tuple[str, ...]:
        """Headers as they appeared in the file."""
        return self._observed

    @property
    def missing(self) -> list[str]:
        """Canonical fields without a matching header, in table order."""
        return [field for field in COLUMN_VARIANTS if field not in self._headers]

    @property
    def unmapped(self) -> list[str]:
        """Observed headers that no canonical field claimed."""
        claimed = set(self._headers.values())
        return [header for header in self._observed if header not in claimed]

    def header_for(self, field: str) -> str | None:
        return self._headers.get(field)

    def get(self, row: Mapping[str, Any], field: str) -> Any:
        """Raw value of a canonical field in a row, or None when unmapped."""
        header = self._headers.get(field)
        if header is None:
            return None
        return row.get(header)

    def __contains__(self, field: object) -> bool:
        return field in self._headers

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"ColumnMapping({dict(self._headers)!r})"


def build_column_mapping(headers: Iterable[str]) -> ColumnMapping:
    """
    Reconcile observed headers against ``COLUMN_VARIANTS``.

    Matching is case-insensitive and ignores surrounding whitespace. For each
    canonical field the variants are tried in order and the first observed
    header matching one of them wins.

    Args:
        headers: Header row as observed in the file.

    Returns:
        ColumnMapping covering every field that found a header.
    """
    observed = [h for h in headers if isinstance(h, str)]

    by_key: dict[str, str] = {}
    for header in observed:
        # first occurrence wins for duplicated spellings
        by_key.setdefault(_key(header), header)

    mapping: dict[str, str] = {}
    for field, variants in COLUMN_VARIANTS.items():
        for variant in variants:
            header = by_key.get(_key(variant))
            if header is not None:
                mapping[field] = header
                break

    result = ColumnMapping(mapping, observed)
    log.debug(
        "Reconciled headers",
        mapped=len(result),
        missing=result.missing,
        unmapped=result.unmapped,
    )
    return result


def missing_required_columns(
    mapping: ColumnMapping,
    required: Iterable[str] = DEFAULT_REQUIRED_COLUMNS,
) -> list[str]:
    """Required canonical fields that found no header."""
    return [field for field in required if field not in mapping]


def validate_headers(
    headers: Iterable[str] | ColumnMapping,
    required: Iterable[str] = DEFAULT_REQUIRED_COLUMNS,
) -> list[str]:
    """
    Check that every required canonical field has a matching header.

    Args:
        headers: Observed header row, or an already built mapping.
        required: Canonical fields that must be present.

    Returns:
        One message per missing field, empty when all are present.
    """
    mapping = headers if isinstance(headers, ColumnMapping) else build_column_mapping(headers)
    messages = [
        f'Missing required column: "{display_label(field)}". '
        f"Expected one of: {', '.join(COLUMN_VARIANTS[field])}"
        for field in missing_required_columns(mapping, required)
    ]

    if messages:
        log.warning("Missing required columns", count=len(messages))

    return messages
