import math
import random
from typing import Callable

from cansatlog.telemetry.sample import RawSample, Sample, derive_units
from cansatlog.util.time import now_ms


class TelemetrySimulator:
    """
    Mock CanSat payload producing plausible readings.

    Intended for:
    - UI development
    - Session bring-up without a radio link
    - Tests (pass a seeded rng and a fixed clock)
    """

    def __init__(
        self,
        clock: Callable[[], int] = now_ms,
        rng: random.Random | None = None,
    ) -> None:
        self._clock = clock
        self._rng = rng or random.Random()

    # ---------------------------------------- #

    def sample(self) -> Sample:
        now = int(self._clock())
        jitter = self._rng.random

        # Slow altitude oscillation around 1 km
        alt = max(0.0, 1000.0 + math.sin(now / 10000.0) * 500.0 + jitter() * 100.0)

        return derive_units(
            RawSample(
                timestamp_ms=now,
                pressure_hpa=1013.25 - alt * 0.12,
                altitude_m=alt,
                vertical_velocity_mps=math.sin(now / 5000.0) * 50.0 + jitter() * 10.0,
                temperature_c=25.0 + math.sin(now / 20000.0) * 10.0 + jitter() * 2.0,
                humidity_pct=60.0 + math.sin(now / 15000.0) * 20.0 + jitter() * 5.0,
                pitch_deg=math.sin(now / 3000.0) * 30.0 + jitter() * 5.0,
                roll_deg=math.cos(now / 4000.0) * 25.0 + jitter() * 5.0,
                yaw_deg=(now / 100.0) % 360.0,
            )
        )
