from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from cansatlog.telemetry.sample import MissionPhase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionConfig:
    history_max: int = 100
    log_max: int = 50
    stale_ms: int = 5000
    tick_interval_ms: int = 1000
    sample_interval_ms: int = 1000
    signal_strength_pct: int | None = 85
    initial_phase: MissionPhase = MissionPhase.ASCENT


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[3]


# ---------------------------------------- #


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def load_session_config(path: Path | None = None) -> SessionConfig:
    """
    Read the [session] table of telemetry.toml.

    A missing file or table yields defaults. Keys with the wrong type or
    range are ignored so a bad edit never prevents the monitor starting.
    """
    if path is None:
        path = _repo_root() / "telemetry.toml"

    try:
        import tomllib
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("tomllib unavailable; need Python 3.11+") from exc

    try:
        data: Any = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return SessionConfig()

    table = data.get("session")
    if not isinstance(table, dict):
        return SessionConfig()

    values: dict[str, Any] = {}
    for f in fields(SessionConfig):
        if f.name not in table:
            continue
        raw = table[f.name]

        if f.name == "initial_phase":
            try:
                values[f.name] = MissionPhase(raw)
            except ValueError:
                logger.warning("Ignoring unknown initial_phase %r in %s", raw, path)
            continue

        if f.name == "signal_strength_pct":
            if isinstance(raw, int) and not isinstance(raw, bool) and 0 <= raw <= 100:
                values[f.name] = raw
            else:
                logger.warning("Ignoring invalid signal_strength_pct %r in %s", raw, path)
            continue

        checked = _positive_int(raw)
        if checked is None:
            logger.warning("Ignoring invalid %s=%r in %s", f.name, raw, path)
            continue
        values[f.name] = checked

    return SessionConfig(**values)
