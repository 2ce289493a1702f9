"""
Pandera schema for the accepted-records frame.

Accepted records leave the pipeline as a DataFrame for downstream
aggregation; this schema is the contract at that boundary.
"""

from collections.abc import Iterable

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series

from crimeingest.schemas.record import (
    AGE_MAX,
    AGE_MIN,
    TIME_PATTERN,
    CaseStatus,
    CrimeRecord,
    Gender,
)
from crimeingest.utils.logging import get_logger

log = get_logger(__name__)

FRAME_COLUMNS: tuple[str, ...] = tuple(CrimeRecord.model_fields)


class CrimeRecordFrameSchema(pa.DataFrameModel):
    """
    Schema for a frame of accepted crime records.

    One row per ``CrimeRecord``, columns named by canonical field.
    """

    report_number: Series[str] = pa.Field(
        str_length={"min_value": 1},
        description="Report identifier",
    )
    date_reported: Series[pa.DateTime] = pa.Field(description="Report date")
    date_of_occurrence: Series[pa.DateTime] = pa.Field(description="Occurrence date")
    time_of_occurrence: Series[str] = pa.Field(
        str_matches=TIME_PATTERN,
        description="24-hour HH:MM time of occurrence",
    )
    city: Series[str] = pa.Field(description="Location of the incident")
    crime_code: Series[str] = pa.Field(description="Offense category code")
    crime_description: Series[str] = pa.Field(description="Offense description")
    victim_age: Series[int] = pa.Field(
        ge=AGE_MIN,
        le=AGE_MAX,
        description="Victim age in years",
    )
    victim_gender: Series[str] = pa.Field(
        isin=[g.value for g in Gender],
        description="Victim gender",
    )
    weapon_used: Series[str] = pa.Field(description="Weapon or method")
    crime_domain: Series[str] = pa.Field(description="Domain classification")
    police_deployed: Series[bool] = pa.Field(description="Responders deployed")
    case_closed: Series[str] = pa.Field(
        isin=[s.value for s in CaseStatus],
        description="Whether the case has been closed",
    )
    date_case_closed: Series[pa.DateTime] = pa.Field(
        nullable=True,
        description="Closure date, only for closed cases",
    )

    @pa.dataframe_check
    def closure_date_requires_closed_case(cls, df: pd.DataFrame) -> Series[bool]:
        """A closure date only appears on closed cases."""
        return df["date_case_closed"].isna() | (df["case_closed"] == CaseStatus.YES.value)

    class Config:
        """Schema configuration."""

        name = "CrimeRecordFrameSchema"
        strict = False
        coerce = True


def records_to_frame(records: Iterable[CrimeRecord], *, validate: bool = True) -> pd.DataFrame:
    """
    Convert accepted records into a DataFrame.

    Args:
        records: Accepted records in input order.
        validate: Whether to validate against ``CrimeRecordFrameSchema``.

    Returns:
        Frame with one column per canonical field.

    Raises:
        pandera.errors.SchemaError: If validation fails.
    """
    df = pd.DataFrame([record.to_row() for record in records], columns=list(FRAME_COLUMNS))

    if validate:
        df = CrimeRecordFrameSchema.validate(df)
        log.debug("Record frame validated", rows=len(df))

    return df
