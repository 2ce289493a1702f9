"""
Pydantic schema for one validated crime-incident record.

Every accepted row leaves the pipeline as a ``CrimeRecord``. The coercion
layer guarantees types; this schema enforces the remaining structural
constraints (non-empty identifier, time format, age range, closure date
consistency) and reports each violation by field path.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
AGE_MIN = 0
AGE_MAX = 120


class Gender(str, Enum):
    """Victim gender after normalization."""

    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class CaseStatus(str, Enum):
    """Whether the case has been closed."""

    YES = "Yes"
    NO = "No"


class CrimeRecord(BaseModel):
    """
    Canonical, schema-conformant crime incident.

    Field names are the canonical field names used by the column-variant
    table in ``crimeingest.normalization.columns``.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    report_number: str = Field(min_length=1, description="Report identifier")
    date_reported: datetime = Field(description="When the incident was reported")
    date_of_occurrence: datetime = Field(description="When the incident happened")
    time_of_occurrence: str = Field(
        pattern=TIME_PATTERN, description="24-hour HH:MM time of occurrence"
    )
    city: str = Field(min_length=1, description="Location of the incident")
    crime_code: str = Field(min_length=1, description="Offense category code")
    crime_description: str = Field(min_length=1, description="Offense description")
    victim_age: int = Field(ge=AGE_MIN, le=AGE_MAX, description="Victim age in years")
    victim_gender: Gender
    weapon_used: str = Field(min_length=1, description="Weapon or method")
    crime_domain: str = Field(min_length=1, description="Domain classification")
    police_deployed: bool = Field(description="Whether responders were deployed")
    case_closed: CaseStatus
    date_case_closed: datetime | None = Field(
        default=None, description="Closure date, only for closed cases"
    )

    @field_validator("date_case_closed")
    @classmethod
    def validate_closure(cls, v: datetime | None, info: ValidationInfo) -> datetime | None:
        """A closure date is only meaningful for a closed case."""
        if v is not None and info.data.get("case_closed") is not CaseStatus.YES:
            msg = "closure date given for a case that is not closed"
            raise ValueError(msg)
        return v

    def to_row(self) -> dict[str, Any]:
        """Flat mapping with enum values unwrapped, for tabular export."""
        row = self.model_dump()
        row["victim_gender"] = self.victim_gender.value
        row["case_closed"] = self.case_closed.value
        return row
