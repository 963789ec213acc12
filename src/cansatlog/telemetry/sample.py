from __future__ import annotations

import enum
import json
import math
from dataclasses import dataclass
from typing import Any, Final, Mapping, TypedDict

FEET_PER_METER: Final[float] = 3.28084

_NUMERIC_FIELDS: Final[tuple[str, ...]] = (
    "pressure_hpa",
    "altitude_m",
    "vertical_velocity_mps",
    "temperature_c",
    "humidity_pct",
    "pitch_deg",
    "roll_deg",
    "yaw_deg",
)


class ValidationError(ValueError):
    """Raised when a telemetry reading cannot be accepted into a session."""


# ---------------------------------------- #


class RawSample(TypedDict, total=False):
    """
    Producer-side reading, before unit derivation.

    All units are SI unless stated otherwise.
    Timestamps are Unix time (milliseconds, int).
    """

    timestamp_ms: int  # Unix timestamp in milliseconds
    pressure_hpa: float  # Barometric pressure in hectopascals
    altitude_m: float  # Altitude in meters
    altitude_ft: float  # Ignored; always re-derived from altitude_m
    vertical_velocity_mps: float  # Vertical velocity in meters per second
    temperature_c: float  # Temperature in degrees Celsius
    humidity_pct: float  # Relative humidity in percent
    pitch_deg: float
    roll_deg: float
    yaw_deg: float


# ---------------------------------------- #


@dataclass(frozen=True)
class Sample:
    """
    One telemetry reading (BMP280 + DHT22 + MPU6050).

    Construct through derive_units() so fields are validated and yaw is
    normalized. altitude_ft is derived, never stored.
    """

    timestamp_ms: int
    pressure_hpa: float
    altitude_m: float
    vertical_velocity_mps: float
    temperature_c: float
    humidity_pct: float
    pitch_deg: float
    roll_deg: float
    yaw_deg: float

    @property
    def altitude_ft(self) -> float:
        return self.altitude_m * FEET_PER_METER

    def to_dict(self) -> dict[str, Any]:
        """Sensor-grouped wire shape, stable key order."""
        return {
            "timestamp": self.timestamp_ms,
            "bmp280": {
                "pressure": self.pressure_hpa,
                "altitude_m": self.altitude_m,
                "altitude_ft": self.altitude_ft,
                "velocity": self.vertical_velocity_mps,
            },
            "dht22": {
                "temperature": self.temperature_c,
                "humidity": self.humidity_pct,
            },
            "mpu6050": {
                "pitch": self.pitch_deg,
                "roll": self.roll_deg,
                "yaw": self.yaw_deg,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Sample:
        try:
            bmp = data["bmp280"]
            dht = data["dht22"]
            mpu = data["mpu6050"]
            raw = RawSample(
                timestamp_ms=data["timestamp"],
                pressure_hpa=bmp["pressure"],
                altitude_m=bmp["altitude_m"],
                vertical_velocity_mps=bmp["velocity"],
                temperature_c=dht["temperature"],
                humidity_pct=dht["humidity"],
                pitch_deg=mpu["pitch"],
                roll_deg=mpu["roll"],
                yaw_deg=mpu["yaw"],
            )
        except (KeyError, TypeError) as exc:
            raise ValidationError(f"malformed telemetry record: {exc}") from exc
        return derive_units(raw)


# ---------------------------------------- #


class MissionPhase(str, enum.Enum):
    PRE_LAUNCH = "pre-launch"
    ASCENT = "ascent"
    DESCENT = "descent"
    LANDED = "landed"
    RECOVERY = "recovery"


@dataclass(frozen=True)
class ConnectionStatus:
    connected: bool
    last_update_ms: int
    signal_strength_pct: int | None = None


@dataclass(frozen=True)
class MissionStatus:
    launched: bool
    current_ms: int
    phase: MissionPhase
    launch_ms: int | None = None


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp_ms: int
    sample: Sample
    raw_text: str

    @classmethod
    def for_sample(cls, sample: Sample) -> LogEntry:
        return cls(
            id=f"log-{sample.timestamp_ms}",
            timestamp_ms=sample.timestamp_ms,
            sample=sample,
            raw_text=json.dumps(sample.to_dict(), indent=2),
        )


# ---------------------------------------- #


def _finite(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    try:
        out = float(value)
    except OverflowError as exc:
        raise ValidationError(f"{name} is out of range for a float") from exc
    if not math.isfinite(out):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return out


def _normalize_yaw(yaw: float) -> float:
    out = yaw % 360.0
    # Tiny negative inputs round up to exactly 360.0.
    return 0.0 if out >= 360.0 else out


def derive_units(raw: RawSample) -> Sample:
    """
    Validate a raw reading and build a fully populated Sample.

    Raises ValidationError if any field is missing or non-finite, or if the
    timestamp is not a non-negative integral millisecond value.
    """
    if "timestamp_ms" not in raw:
        raise ValidationError("timestamp_ms is required")
    ts = _finite("timestamp_ms", raw["timestamp_ms"])
    if ts < 0 or not ts.is_integer():
        raise ValidationError(
            f"timestamp_ms must be a non-negative integer, got {raw['timestamp_ms']!r}"
        )

    values: dict[str, float] = {}
    for name in _NUMERIC_FIELDS:
        if name not in raw:
            raise ValidationError(f"{name} is required")
        values[name] = _finite(name, raw[name])  # type: ignore[literal-required]

    values["yaw_deg"] = _normalize_yaw(values["yaw_deg"])
    return Sample(timestamp_ms=int(ts), **values)


# ---------------------------------------- #


def altitude_trend(sample: Sample) -> str:
    v = sample.vertical_velocity_mps
    if v > 0:
        return "up"
    if v < -1:
        return "down"
    return "stable"


def log_preview(entry: LogEntry) -> str:
    s = entry.sample
    return (
        f"ALT: {s.altitude_m:.1f}m | VEL: {s.vertical_velocity_mps:.1f}m/s"
        f" | TEMP: {s.temperature_c:.1f}°C"
    )


def orientation_preview(entry: LogEntry) -> str:
    s = entry.sample
    return f"P/R/Y: {s.pitch_deg:.1f}°/{s.roll_deg:.1f}°/{s.yaw_deg:.1f}°"
