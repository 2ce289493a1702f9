"""Basic package tests to verify installation."""


def test_package_imports() -> None:
    """Verify the main package can be imported."""
    import crimeingest

    assert crimeingest.__version__


def test_config_module_imports() -> None:
    """Verify config module structure is correct."""
    from crimeingest.config import IngestConfig, load_config

    assert IngestConfig is not None
    assert load_config is not None


def test_parsing_module_imports() -> None:
    """Verify parsing module exports."""
    from crimeingest.parsing import (
        Parsed,
        Unparsed,
        coerce_age,
        coerce_case_status,
        coerce_date,
        coerce_flag,
        coerce_gender,
        coerce_optional_date,
        coerce_time,
    )

    assert Parsed is not None
    assert Unparsed is not None
    assert all(
        callable(f)
        for f in (
            coerce_age,
            coerce_case_status,
            coerce_date,
            coerce_flag,
            coerce_gender,
            coerce_optional_date,
            coerce_time,
        )
    )


def test_validation_module_imports() -> None:
    """Verify validation module exports."""
    from crimeingest.validation import (
        ConsoleReporter,
        RowCoercer,
        ValidationAggregate,
        ValidationPipeline,
        render_report,
        validate_file,
        validate_rows,
    )

    assert ValidationPipeline is not None
    assert RowCoercer is not None
    assert ValidationAggregate is not None
    assert ConsoleReporter is not None
    assert render_report is not None
    assert validate_file is not None
    assert validate_rows is not None


def test_schemas_module_imports() -> None:
    """Verify schemas module exports."""
    from crimeingest.schemas import CrimeRecord, CrimeRecordFrameSchema, records_to_frame

    assert CrimeRecord is not None
    assert CrimeRecordFrameSchema is not None
    assert records_to_frame is not None
