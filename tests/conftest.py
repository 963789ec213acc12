from __future__ import annotations

from typing import Any, Callable

import pytest
from PySide6 import QtCore

from cansatlog.telemetry.sample import RawSample, Sample, derive_units


def raw_sample(timestamp_ms: int = 1_700_000_000_000, **overrides: Any) -> RawSample:
    raw = RawSample(
        timestamp_ms=timestamp_ms,
        pressure_hpa=1000.0,
        altitude_m=123.45,
        vertical_velocity_mps=1.2,
        temperature_c=20.0,
        humidity_pct=50.0,
        pitch_deg=1.0,
        roll_deg=2.0,
        yaw_deg=3.0,
    )
    raw.update(overrides)  # type: ignore[typeddict-item]
    return raw


@pytest.fixture
def make_raw() -> Callable[..., RawSample]:
    return raw_sample


@pytest.fixture
def make_sample() -> Callable[..., Sample]:
    def _make(timestamp_ms: int = 1_700_000_000_000, **overrides: Any) -> Sample:
        return derive_units(raw_sample(timestamp_ms, **overrides))

    return _make


class FakeClock:
    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_700_000_000_000)


@pytest.fixture(scope="session")
def qapp() -> QtCore.QCoreApplication:
    app = QtCore.QCoreApplication.instance()
    if app is None:
        app = QtCore.QCoreApplication([])
    return app
