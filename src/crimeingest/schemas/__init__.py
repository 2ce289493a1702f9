"""
Data contracts for validated output.

``CrimeRecord`` (pydantic) validates single records inside the pipeline;
``CrimeRecordFrameSchema`` (pandera) validates the accepted-records frame
handed to downstream consumers.
"""

from crimeingest.schemas.frame import FRAME_COLUMNS, CrimeRecordFrameSchema, records_to_frame
from crimeingest.schemas.record import AGE_MAX, AGE_MIN, CaseStatus, CrimeRecord, Gender

__all__ = [
    "AGE_MAX",
    "AGE_MIN",
    "FRAME_COLUMNS",
    "CaseStatus",
    "CrimeRecord",
    "CrimeRecordFrameSchema",
    "Gender",
    "records_to_frame",
]
