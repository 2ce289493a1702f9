"""
Typed configuration models using Pydantic.

All pipeline limits and switches live here with explicit defaults, so
processing code never hardcodes a ceiling or a policy.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crimeingest.normalization.columns import COLUMN_VARIANTS, DEFAULT_REQUIRED_COLUMNS

MIB = 1024 * 1024


class IngestConfig(BaseModel):
    """Complete configuration for admission, parsing and validation."""

    model_config = ConfigDict(frozen=True)

    max_file_size: int = Field(
        default=50 * MIB, gt=0, description="Maximum accepted file size in bytes"
    )
    max_rows: int = Field(
        default=100_000, gt=0, description="Maximum number of data rows per file"
    )
    batch_size: int = Field(
        default=1000, gt=0, description="Rows coerced per batch between progress events"
    )
    accepted_media_types: list[str] = Field(
        default_factory=lambda: ["text/csv", "application/csv", "text/plain"],
        description="Advisory allow-list of declared media types",
    )
    accepted_extension: str = Field(
        default=".csv", description="Authoritative file name suffix"
    )
    required_columns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REQUIRED_COLUMNS),
        description="Canonical fields that must have a matching header",
    )
    strict_headers: bool = Field(
        default=False,
        description="Abort when a required column is missing instead of warning",
    )
    strict_coercion: bool = Field(
        default=False,
        description="Reject rows whose non-empty values cannot be parsed instead of defaulting",
    )
    skip_empty_rows: bool = Field(
        default=True, description="Drop rows whose cells are all empty"
    )
    trim_whitespace: bool = Field(
        default=True, description="Strip surrounding whitespace from string cells"
    )
    preview_bytes: int = Field(
        default=10_000, gt=0, description="Prefix size read by the preview sampler"
    )
    preview_rows: int = Field(
        default=5, gt=0, description="Data rows returned by the preview sampler"
    )
    delimiter: str = Field(
        default=",", min_length=1, max_length=1, description="Field delimiter"
    )
    encoding: str = Field(default="utf-8", description="Text encoding of input files")

    @field_validator("required_columns")
    @classmethod
    def validate_required_columns(cls, v: list[str]) -> list[str]:
        """Ensure every required column is a known canonical field."""
        unknown = [name for name in v if name not in COLUMN_VARIANTS]
        if unknown:
            msg = f"Unknown canonical columns: {unknown}. Known: {list(COLUMN_VARIANTS)}"
            raise ValueError(msg)
        return v

    @field_validator("accepted_extension")
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Lower-case the suffix and make sure it starts with a dot."""
        v = v.strip().lower()
        if not v:
            msg = "accepted_extension must not be empty"
            raise ValueError(msg)
        return v if v.startswith(".") else f".{v}"

    @property
    def max_file_size_mb(self) -> float:
        """Size ceiling in MiB, for messages."""
        return self.max_file_size / MIB
