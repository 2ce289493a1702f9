"""
Preview sampling.

Reads a bounded prefix of a file to show its headers and first rows and to
estimate the full row count. The estimate is for display only and never
gates admission.
"""

import io
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from crimeingest.config.settings import IngestConfig
from crimeingest.errors import StructuralError
from crimeingest.ingestion.readers import is_empty_row
from crimeingest.utils.logging import get_logger

log = get_logger(__name__)

ROWS_PER_SECOND_UNIT = 1000
SECONDS_PER_UNIT = 2


@dataclass(frozen=True)
class PreviewData:
    """Headers and sample rows of a file plus rough size estimates."""

    headers: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)
    estimated_total_rows: int = 0
    estimated_seconds: int = SECONDS_PER_UNIT


def estimate_seconds(estimated_rows: int) -> int:
    """Two seconds per thousand rows, rounded, never below one unit."""
    units = max(1, math.floor(estimated_rows / ROWS_PER_SECOND_UNIT + 0.5))
    return units * SECONDS_PER_UNIT


def _complete_prefix(prefix: bytes, truncated: bool) -> bytes:
    """Cut a truncated prefix back to its last complete line."""
    if not truncated:
        return prefix
    cut = prefix.rfind(b"\n")
    return prefix[: cut + 1] if cut >= 0 else prefix


def preview_file(path: Path, config: IngestConfig | None = None) -> PreviewData:
    """
    Sample the start of a delimited file.

    Args:
        path: File to sample.
        config: ``preview_bytes`` and ``preview_rows`` bound the sample.

    Returns:
        PreviewData with at most ``preview_rows`` rows.

    Raises:
        StructuralError: If the prefix cannot be read or parsed.
    """
    config = config or IngestConfig()

    try:
        total_size = path.stat().st_size
        with path.open("rb") as f:
            raw = f.read(config.preview_bytes)
    except OSError as e:
        raise StructuralError("Failed to read file", str(e)) from e

    prefix = _complete_prefix(raw, truncated=total_size > len(raw))

    try:
        text = prefix.decode(config.encoding, errors="ignore")
        df = pd.read_csv(
            io.StringIO(text),
            sep=config.delimiter,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return PreviewData(headers=[])
    except (pd.errors.ParserError, LookupError) as e:
        raise StructuralError("Preview failed", str(e)) from e

    headers = [str(c) for c in df.columns]
    sample = [r for r in df.to_dict(orient="records") if not is_empty_row(r)]

    if total_size <= len(raw):
        estimated = len(sample)
    elif sample:
        header_bytes = prefix.find(b"\n") + 1
        data_bytes = max(1, len(prefix) - header_bytes)
        estimated = round((total_size - header_bytes) / data_bytes * len(sample))
    else:
        estimated = 0

    log.debug(
        "Previewed file",
        path=str(path),
        headers=len(headers),
        sampled=len(sample),
        estimated_rows=estimated,
    )

    return PreviewData(
        headers=headers,
        rows=sample[: config.preview_rows],
        estimated_total_rows=estimated,
        estimated_seconds=estimate_seconds(estimated),
    )
