"""Tests for history CSV export and chart series."""

from __future__ import annotations

import numpy as np
import pytest

from cansatlog.telemetry.export import (
    CSV_HEADER,
    export_filename,
    format_number,
    history_series,
    history_to_csv,
)
from cansatlog.telemetry.session import TelemetrySession

HEADER: str = "timestamp,altitude_m,altitude_ft,velocity,pressure,temperature,humidity,pitch,roll,yaw"


def test_header_columns() -> None:
    """Ensure the column order is fixed."""
    assert ",".join(CSV_HEADER) == HEADER


def test_empty_history_is_header_only(clock) -> None:
    """Ensure an empty session exports just the header."""
    session = TelemetrySession(clock=clock)
    assert session.export_history() == HEADER


def test_single_sample_export(clock, make_sample) -> None:
    """Ensure the reference sample renders as header plus one row."""
    session = TelemetrySession(clock=clock)
    session.submit_sample(make_sample(1_700_000_000_000))

    lines: list[str] = session.export_history().split("\n")
    assert len(lines) == 2
    assert lines[0] == HEADER
    assert lines[1] == (
        f"2023-11-14T22:13:20.000Z,123.45,{123.45 * 3.28084!r},1.2,1000,20,50,1,2,3"
    )
    assert float(lines[1].split(",")[2]) == pytest.approx(405.02, abs=1e-2)


def test_export_does_not_mutate(clock, make_sample) -> None:
    """Ensure exporting leaves the session untouched."""
    session = TelemetrySession(clock=clock)
    session.submit_sample(make_sample(1_000))
    before = session.snapshot()
    session.export_history()
    assert session.snapshot() == before


def test_rows_oldest_first(make_sample) -> None:
    """Ensure rows follow history order."""
    samples = [make_sample(1_000 * i, altitude_m=float(i)) for i in range(1, 4)]
    rows: list[str] = history_to_csv(samples).split("\n")[1:]
    assert [row.split(",")[1] for row in rows] == ["1", "2", "3"]
    assert rows[0].startswith("1970-01-01T00:00:01.000Z,")


@pytest.mark.parametrize(
    ("value", "text"),
    [
        (1.0, "1"),
        (1000.0, "1000"),
        (-0.0, "0"),
        (123.45, "123.45"),
        (0.1 + 0.2, "0.30000000000000004"),
        (-2.5, "-2.5"),
        (1.234e-05, "0.00001234"),
        (-1.234e-05, "-0.00001234"),
        (1e-6, "0.000001"),
        (1e-7, "1e-7"),
        (1.5e-7, "1.5e-7"),
        (1e16, "10000000000000000"),
        (1.5e20, "150000000000000000000"),
        (1e21, "1e+21"),
        (1.25e22, "1.25e+22"),
    ],
)
def test_format_number(value: float, text: str) -> None:
    """Ensure full-precision output without spurious fractional zeros."""
    assert format_number(value) == text


def test_history_series(make_sample) -> None:
    """Ensure chart columns line up with the history."""
    samples = [make_sample(1_000 * i, altitude_m=10.0 * i, temperature_c=20.0 + i) for i in range(3)]
    series = history_series(samples)
    assert series.timestamp_ms.dtype == np.int64
    np.testing.assert_array_equal(series.timestamp_ms, [0, 1_000, 2_000])
    np.testing.assert_allclose(series.altitude_m, [0.0, 10.0, 20.0])
    np.testing.assert_allclose(series.vertical_velocity_mps, [1.2, 1.2, 1.2])
    np.testing.assert_allclose(series.temperature_c, [20.0, 21.0, 22.0])


def test_history_series_empty() -> None:
    """Ensure an empty history yields empty arrays."""
    series = history_series([])
    assert series.altitude_m.shape == (0,)


def test_export_filename() -> None:
    """Ensure the download name carries the UTC date."""
    assert export_filename(1_700_000_000_000) == "telemetry-2023-11-14.csv"


def test_small_values_export_positionally(make_sample) -> None:
    """Ensure near-zero readings are written as plain decimals."""
    row: str = history_to_csv([make_sample(0, vertical_velocity_mps=1.234e-05)]).split("\n")[1]
    assert row.split(",")[3] == "0.00001234"
