from __future__ import annotations

import math
from decimal import Decimal
from typing import Final, Iterable, NamedTuple

import numpy as np

from cansatlog.telemetry.sample import Sample
from cansatlog.util.time import iso_date, iso_timestamp

CSV_HEADER: Final[tuple[str, ...]] = (
    "timestamp",
    "altitude_m",
    "altitude_ft",
    "velocity",
    "pressure",
    "temperature",
    "humidity",
    "pitch",
    "roll",
    "yaw",
)


class HistorySeries(NamedTuple):
    """Column arrays for trend charts, oldest sample first."""

    timestamp_ms: np.ndarray
    altitude_m: np.ndarray
    vertical_velocity_mps: np.ndarray
    temperature_c: np.ndarray


# ---------------------------------------- #


def format_number(value: float) -> str:
    """
    Render a float the way JavaScript's Number toString does.

    Shortest round-trip digits, positional for 1e-6 <= |x| < 1e21 and
    exponent form outside it:
    1.0 -> "1", 1.234e-05 -> "0.00001234", 1e16 -> "10000000000000000",
    1e-7 -> "1e-7", 1e21 -> "1e+21".
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    # value == 0.digits * 10**n
    n = k + int(exponent)

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * -n + digits

    mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
    e = n - 1
    return f"{sign}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def _row(sample: Sample) -> list[str]:
    return [
        iso_timestamp(sample.timestamp_ms),
        format_number(sample.altitude_m),
        format_number(sample.altitude_ft),
        format_number(sample.vertical_velocity_mps),
        format_number(sample.pressure_hpa),
        format_number(sample.temperature_c),
        format_number(sample.humidity_pct),
        format_number(sample.pitch_deg),
        format_number(sample.roll_deg),
        format_number(sample.yaw_deg),
    ]


# ---------------------------------------- #


def history_to_csv(history: Iterable[Sample]) -> str:
    """
    Serialize samples as CSV, one row per sample in the given order.

    Lines are joined with "\\n" and there is no trailing newline, so an empty
    history yields the header line alone.
    """
    lines = [",".join(CSV_HEADER)]
    lines.extend(",".join(_row(s)) for s in history)
    return "\n".join(lines)


# ---------------------------------------- #


def history_series(history: Iterable[Sample]) -> HistorySeries:
    samples = list(history)
    return HistorySeries(
        timestamp_ms=np.fromiter((s.timestamp_ms for s in samples), dtype=np.int64, count=len(samples)),
        altitude_m=np.fromiter((s.altitude_m for s in samples), dtype=np.float64, count=len(samples)),
        vertical_velocity_mps=np.fromiter(
            (s.vertical_velocity_mps for s in samples), dtype=np.float64, count=len(samples)
        ),
        temperature_c=np.fromiter((s.temperature_c for s in samples), dtype=np.float64, count=len(samples)),
    )


# ---------------------------------------- #


def export_filename(timestamp_ms: int) -> str:
    return f"telemetry-{iso_date(timestamp_ms)}.csv"
