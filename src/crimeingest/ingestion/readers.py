"""
Delimited-text and row-sequence readers.

Both produce a ``RawTable``: the header row plus one mapping of header ->
raw cell per data row. Cells are read as text; typing is left to the
coercion engine.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from crimeingest.config.settings import IngestConfig
from crimeingest.errors import StructuralError
from crimeingest.parsing.outcomes import is_missing
from crimeingest.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class RawTable:
    """Header row and raw data rows of one input."""

    headers: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def is_empty_row(row: Mapping[str, Any]) -> bool:
    """True when every cell is missing or blank."""
    return all(
        is_missing(value) or (isinstance(value, str) and not value.strip())
        for value in row.values()
    )


def _too_many_rows(count: int, limit: int) -> StructuralError:
    return StructuralError(
        f"File contains too many rows ({count}). Maximum allowed: {limit}",
    )


def read_delimited(path: Path, config: IngestConfig | None = None) -> RawTable:
    """
    Read a delimited text file with a header row.

    The file is streamed in chunks of ``batch_size`` rows and the row ceiling
    is checked after every chunk, so an oversized file is abandoned without
    being read to the end.

    Args:
        path: File to read.
        config: Delimiter, encoding, limits and empty-row policy.

    Returns:
        RawTable with every data row in file order.

    Raises:
        StructuralError: If the file cannot be read or parsed, or exceeds
            ``max_rows``.
    """
    config = config or IngestConfig()
    log.info("Reading delimited file", path=str(path))

    headers: list[str] = []
    rows: list[dict[str, Any]] = []

    try:
        reader = pd.read_csv(
            path,
            sep=config.delimiter,
            encoding=config.encoding,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=config.skip_empty_rows,
            chunksize=config.batch_size,
        )
        with reader:
            for chunk in reader:
                if not headers:
                    headers = [str(c) for c in chunk.columns]
                records = chunk.to_dict(orient="records")
                if config.skip_empty_rows:
                    records = [r for r in records if not is_empty_row(r)]
                rows.extend(records)

                if len(rows) > config.max_rows:
                    log.error("Row ceiling exceeded", rows=len(rows), max_rows=config.max_rows)
                    raise _too_many_rows(len(rows), config.max_rows)
    except pd.errors.EmptyDataError:
        log.warning("File is empty", path=str(path))
        return RawTable(headers=[], rows=[])
    except pd.errors.ParserError as e:
        log.error("CSV parsing failed", path=str(path), error=str(e))
        raise StructuralError("CSV parsing failed", str(e)) from e
    except (UnicodeDecodeError, OSError) as e:
        log.error("Failed to read file", path=str(path), error=str(e))
        raise StructuralError("Failed to read file", str(e)) from e

    if not headers:
        # header row only: pandas yields no chunks
        headers = _read_header(path, config)

    log.info("Read delimited file", rows=len(rows), columns=len(headers))
    return RawTable(headers=headers, rows=rows)


def _read_header(path: Path, config: IngestConfig) -> list[str]:
    df = pd.read_csv(
        path,
        sep=config.delimiter,
        encoding=config.encoding,
        dtype=str,
        nrows=0,
    )
    return [str(c) for c in df.columns]


def table_from_rows(
    rows: Iterable[Mapping[str, Any]],
    config: IngestConfig | None = None,
) -> RawTable:
    """
    Build a RawTable from already decoded row mappings.

    Headers are the union of row keys in first-seen order. Values keep their
    original types (datetime, number, bool, None or text).

    Raises:
        StructuralError: If the row count exceeds ``max_rows``.
    """
    config = config or IngestConfig()

    headers: dict[str, None] = {}
    table_rows: list[dict[str, Any]] = []
    for row in rows:
        record = dict(row)
        if config.skip_empty_rows and is_empty_row(record):
            continue
        for key in record:
            headers.setdefault(str(key), None)
        table_rows.append(record)
        if len(table_rows) > config.max_rows:
            log.error("Row ceiling exceeded", rows=len(table_rows), max_rows=config.max_rows)
            raise _too_many_rows(len(table_rows), config.max_rows)

    return RawTable(headers=list(headers), rows=table_rows)
