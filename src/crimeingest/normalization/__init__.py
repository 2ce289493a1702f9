"""
Header normalization layer.

Reconciles real-world column spellings with canonical field names.
"""

from crimeingest.normalization.columns import (
    COLUMN_VARIANTS,
    DEFAULT_REQUIRED_COLUMNS,
    ColumnMapping,
    build_column_mapping,
    display_label,
    missing_required_columns,
    validate_headers,
)

__all__ = [
    "COLUMN_VARIANTS",
    "DEFAULT_REQUIRED_COLUMNS",
    "ColumnMapping",
    "build_column_mapping",
    "display_label",
    "missing_required_columns",
    "validate_headers",
]
