"""Tests for the chunked validation pipeline."""

import asyncio
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

from crimeingest.config import IngestConfig
from crimeingest.errors import AdmissionError, HeaderError, StructuralError
from crimeingest.ingestion.readers import RawTable, read_delimited
from crimeingest.normalization.columns import build_column_mapping
from crimeingest.schemas.record import Gender
from crimeingest.validation import pipeline as pipeline_module
from crimeingest.validation.pipeline import (
    ValidationPipeline,
    validate_file,
    validate_file_async,
    validate_rows,
)
from crimeingest.validation.types import ProgressEvent, ValidationAggregate


def _mixed_rows(count: int) -> list[list[str]]:
    """Rows where every third one has an unparseable age."""
    return [
        [f"R{i}", "2024-01-15", "Metro", "Theft", "oops" if i % 3 == 0 else "30", "Male"]
        for i in range(count)
    ]


class TestValidateFile:
    """End-to-end file validation."""

    def test_single_row_scenario(
        self, write_csv: Callable[..., Path], minimal_headers: list[str]
    ) -> None:
        """Test the canonical single-row example."""
        path = write_csv(minimal_headers, [["R1", "15/01/2024", "Metro", "Theft", "30", "Male"]])
        aggregate = validate_file(path)

        assert len(aggregate.valid_records) == 1
        record = aggregate.valid_records[0]
        assert record.report_number == "R1"
        assert record.date_of_occurrence == datetime(2024, 1, 15)
        assert record.victim_age == 30
        assert record.victim_gender is Gender.MALE
        assert aggregate.header_warnings == []

    def test_standard_file(self, standard_csv: Path) -> None:
        """Test a file with every column."""
        aggregate = validate_file(standard_csv)
        summary = aggregate.summary
        assert summary.total_rows == 3
        assert summary.valid_rows == 3
        assert summary.invalid_rows == 0
        assert summary.error_rate == 0.0

    def test_lenient_age_policy(
        self, write_csv: Callable[..., Path], minimal_headers: list[str]
    ) -> None:
        """Test an unparseable age is defaulted and counted."""
        path = write_csv(
            minimal_headers, [["R1", "2024-01-15", "Metro", "Theft", "not-a-number", "Male"]]
        )
        aggregate = validate_file(path)
        assert aggregate.valid_records[0].victim_age == 25
        assert aggregate.defaulted_fields["victim_age"] == 1

    def test_strict_age_policy(
        self, write_csv: Callable[..., Path], minimal_headers: list[str]
    ) -> None:
        """Test strict coercion rejects an unparseable age."""
        path = write_csv(
            minimal_headers, [["R1", "2024-01-15", "Metro", "Theft", "not-a-number", "Male"]]
        )
        aggregate = validate_file(path, IngestConfig(strict_coercion=True))
        assert aggregate.valid_records == []
        assert len(aggregate.invalid_rows) == 1
        assert aggregate.invalid_rows[0].errors[0].path == "victim_age"

    def test_summary_invariant(
        self, write_csv: Callable[..., Path], minimal_headers: list[str]
    ) -> None:
        """Test valid + invalid == total and the error rate formula."""
        path = write_csv(minimal_headers, _mixed_rows(10))
        aggregate = validate_file(path, IngestConfig(strict_coercion=True, batch_size=3))
        summary = aggregate.summary
        assert summary.valid_rows + summary.invalid_rows == summary.total_rows == 10
        assert summary.invalid_rows == 4
        assert summary.error_rate == round(4 / 10 * 100, 2)

    def test_order_preserved_across_batches(
        self, write_csv: Callable[..., Path], minimal_headers: list[str]
    ) -> None:
        """Test accepted and rejected rows keep input order across batches."""
        path = write_csv(minimal_headers, _mixed_rows(25))
        aggregate = validate_file(path, IngestConfig(strict_coercion=True, batch_size=4))

        indices = aggregate.valid_row_indices
        assert indices == sorted(set(indices))
        assert [r.report_number for r in aggregate.valid_records] == [f"R{i}" for i in indices]

        rejected = [o.row_index for o in aggregate.invalid_rows]
        assert rejected == [i for i in range(25) if i % 3 == 0]

    def test_missing_required_header_lenient(self, write_csv: Callable[..., Path]) -> None:
        """Test missing required headers warn and rows still validate."""
        path = write_csv(["Report Number", "City"], [["R1", "Metro"]])
        aggregate = validate_file(path)
        assert len(aggregate.header_warnings) == 4
        assert len(aggregate.valid_records) == 1
        assert aggregate.valid_records[0].victim_age == 25

    def test_missing_required_header_strict(self, write_csv: Callable[..., Path]) -> None:
        """Test strict headers abort the run."""
        path = write_csv(["Report Number", "City"], [["R1", "Metro"]])
        with pytest.raises(HeaderError, match="Header validation failed") as exc_info:
            validate_file(path, IngestConfig(strict_headers=True))
        assert "victim_gender" in exc_info.value.missing

    def test_size_ceiling(self, write_csv: Callable[..., Path], minimal_headers: list[str]) -> None:
        """Test a file one byte over the size ceiling is not admitted."""
        path = write_csv(minimal_headers, _mixed_rows(3))
        size = path.stat().st_size
        with pytest.raises(AdmissionError, match="exceeds maximum"):
            validate_file(path, IngestConfig(max_file_size=size - 1))

    def test_wrong_extension(self, tmp_path: Path) -> None:
        """Test a non-CSV name is not admitted."""
        path = tmp_path / "incidents.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(AdmissionError, match=r"\.csv extension"):
            validate_file(path)

    def test_row_ceiling(self, write_csv: Callable[..., Path], minimal_headers: list[str]) -> None:
        """Test exceeding max_rows aborts without an aggregate."""
        path = write_csv(minimal_headers, _mixed_rows(12))
        with pytest.raises(StructuralError, match="too many rows"):
            validate_file(path, IngestConfig(max_rows=10, batch_size=5))

    def test_row_ceiling_exact(
        self, write_csv: Callable[..., Path], minimal_headers: list[str]
    ) -> None:
        """Test exactly max_rows rows are accepted."""
        path = write_csv(minimal_headers, _mixed_rows(10))
        aggregate = validate_file(path, IngestConfig(max_rows=10, batch_size=5))
        assert aggregate.summary.total_rows == 10

    def test_malformed_csv(self, tmp_path: Path) -> None:
        """Test a structurally broken file raises StructuralError."""
        path = tmp_path / "broken.csv"
        path.write_text('ID,City\n1,"Metro\n2,Town\n', encoding="utf-8")
        with pytest.raises(StructuralError, match="CSV parsing failed"):
            validate_file(path)

    def test_empty_rows_skipped(self, tmp_path: Path, minimal_headers: list[str]) -> None:
        """Test blank and all-empty rows are not counted."""
        path = tmp_path / "gaps.csv"
        header = ",".join(minimal_headers)
        path.write_text(
            f"{header}\nR1,2024-01-15,Metro,Theft,30,Male\n\n,,,,,\nR2,2024-01-16,Metro,Theft,31,Female\n",
            encoding="utf-8",
        )
        aggregate = validate_file(path)
        assert aggregate.summary.total_rows == 2
        assert aggregate.valid_row_indices == [0, 1]

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test an empty file produces an empty aggregate."""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        aggregate = validate_file(path)
        assert aggregate.summary.total_rows == 0
        assert aggregate.summary.error_rate == 0.0


class TestProgress:
    """Tests for progress events."""

    def test_events_monotonic_and_complete(
        self, write_csv: Callable[..., Path], minimal_headers: list[str]
    ) -> None:
        """Test percentages never decrease and end at 100."""
        path = write_csv(minimal_headers, _mixed_rows(10))
        events: list[ProgressEvent] = []
        validate_file(path, IngestConfig(batch_size=3), progress=events.append)

        percents = [e.percent_complete for e in events]
        assert percents == sorted(percents)
        assert percents[0] == 0.0
        assert percents[-1] == 100.0
        assert all(0.0 <= p <= 100.0 for p in percents)
        assert events[-1].stage == "Processing complete!"
        assert "Processing rows 10-10 of 10..." in [e.stage for e in events]

    def test_one_event_per_batch(
        self, write_csv: Callable[..., Path], minimal_headers: list[str]
    ) -> None:
        """Test each batch reports progress."""
        path = write_csv(minimal_headers, _mixed_rows(10))
        events: list[ProgressEvent] = []
        validate_file(path, IngestConfig(batch_size=3), progress=events.append)
        batch_events = [e for e in events if e.stage.startswith("Processing rows")]
        assert len(batch_events) == 4

    def test_event_clamped(self) -> None:
        """Test percentages outside [0, 100] are clamped."""
        assert ProgressEvent(150, "x").percent_complete == 100.0
        assert ProgressEvent(-3, "x").percent_complete == 0.0


class TestIterBatches:
    """Tests for the lazy batch sequence."""

    def test_batches_in_order(self) -> None:
        """Test batches cover every row once, in order."""
        table = RawTable(headers=["City"], rows=[{"City": f"C{i}"} for i in range(7)])
        pipeline = ValidationPipeline(IngestConfig(batch_size=3))
        batches = list(pipeline.iter_batches(table, build_column_mapping(table.headers)))

        assert [b.start_index for b in batches] == [0, 3, 6]
        assert [b.rows_processed for b in batches] == [3, 6, 7]
        indices = [o.row_index for b in batches for o in b.outcomes]
        assert indices == list(range(7))

    def test_lazy(self) -> None:
        """Test nothing is coerced before the first batch is requested."""
        table = RawTable(headers=["City"], rows=[{"City": "Metro"}] * 5)
        pipeline = ValidationPipeline(IngestConfig(batch_size=2))
        batches = pipeline.iter_batches(table, build_column_mapping(table.headers))
        first = next(batches)
        assert len(first.outcomes) == 2


class TestValidateRows:
    """Tests for already decoded rows."""

    def test_typed_rows(self) -> None:
        """Test spreadsheet-style typed values."""
        rows = [
            {
                "Report Number": "R1",
                "Date of Occurrence": datetime(2024, 1, 15, 8, 0),
                "Time of Occurrence": 0.75,
                "City": "Metro",
                "Crime Description": "Theft",
                "Victim Age": 30.0,
                "Victim Gender": "F",
                "Case Closed": True,
                "Date Case Closed": 45311,
            },
            {"Report Number": None, "City": None},
        ]
        aggregate = validate_rows(rows)

        assert aggregate.summary.total_rows == 1
        record = aggregate.valid_records[0]
        assert record.date_of_occurrence == datetime(2024, 1, 15, 8, 0)
        assert record.time_of_occurrence == "18:00"
        assert record.victim_gender is Gender.FEMALE
        assert record.date_case_closed == datetime(2024, 1, 20)

    def test_colon_time_column(self) -> None:
        """Test plain and timestamped clock times are accepted."""
        rows = [
            {"Report Number": "R1", "Time of Occurrence": "14:30", "City": "Metro"},
            {"Report Number": "R2", "Time of Occurrence": "9:05:30", "City": "Metro"},
            {"Report Number": "R3", "Time of Occurrence": "2024-01-15 21:45:00", "City": "Metro"},
        ]
        aggregate = validate_rows(rows)

        assert aggregate.summary.invalid_rows == 0
        times = [record.time_of_occurrence for record in aggregate.valid_records]
        assert times == ["14:30", "09:05", "21:45"]

    def test_headers_are_union(self) -> None:
        """Test headers come from every row in first-seen order."""
        rows = [{"City": "Metro"}, {"City": "Town", "Victim Age": 40}]
        aggregate = validate_rows(rows)
        assert aggregate.valid_records[1].victim_age == 40

    def test_row_ceiling(self) -> None:
        """Test the row ceiling applies to decoded rows too."""
        rows = [{"City": "Metro"}] * 4
        with pytest.raises(StructuralError):
            validate_rows(rows, IngestConfig(max_rows=3))


class TestValidateFileAsync:
    """Tests for the event loop adapter."""

    def test_matches_sync(self, write_csv: Callable[..., Path], minimal_headers: list[str]) -> None:
        """Test the async variant produces the same aggregate."""
        path = write_csv(minimal_headers, _mixed_rows(7))
        config = IngestConfig(strict_coercion=True, batch_size=2)
        events: list[ProgressEvent] = []

        result = asyncio.run(validate_file_async(path, config, events.append))
        expected = validate_file(path, config)

        assert result.summary == expected.summary
        assert result.valid_row_indices == expected.valid_row_indices
        assert events[-1].percent_complete == 100.0

    def test_read_leaves_loop_free(
        self, standard_csv: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test another task runs while the file is being read."""
        released = threading.Event()
        waited: list[bool] = []

        def blocking_read(path: Path, config: IngestConfig) -> RawTable:
            waited.append(released.wait(timeout=5))
            return read_delimited(path, config)

        monkeypatch.setattr(pipeline_module, "read_delimited", blocking_read)

        async def release() -> None:
            released.set()

        async def main() -> ValidationAggregate:
            result, _ = await asyncio.gather(validate_file_async(standard_csv), release())
            return result

        aggregate = asyncio.run(main())

        assert waited == [True]
        assert aggregate.summary.total_rows == 3


class TestReadDelimited:
    """Tests for the delimited reader."""

    def test_cells_are_text(self, standard_csv: Path) -> None:
        """Test cells are read as strings and blanks stay blank."""
        table = read_delimited(standard_csv)
        assert len(table) == 3
        assert table.rows[0]["Victim Age"] == "30"
        assert table.rows[2]["Date Case Closed"] == ""

    def test_header_only(self, tmp_path: Path) -> None:
        """Test a header without rows."""
        path = tmp_path / "header.csv"
        path.write_text("ID,City\n", encoding="utf-8")
        table = read_delimited(path)
        assert table.headers == ["ID", "City"]
        assert table.rows == []

    def test_semicolon_delimiter(self, tmp_path: Path) -> None:
        """Test a configured delimiter."""
        path = tmp_path / "semi.csv"
        path.write_text("ID;City\n1;Metro\n", encoding="utf-8")
        table = read_delimited(path, IngestConfig(delimiter=";"))
        assert table.rows == [{"ID": "1", "City": "Metro"}]
