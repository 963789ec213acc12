from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable

from cansatlog.telemetry import export
from cansatlog.telemetry.sample import (
    ConnectionStatus,
    LogEntry,
    MissionPhase,
    MissionStatus,
    Sample,
    ValidationError,
)
from cansatlog.util.config import SessionConfig
from cansatlog.util.time import now_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Read-only view of a session, safe to hand to the UI thread.

    history is oldest first, log is newest first.
    """

    current: Sample | None
    history: tuple[Sample, ...]
    log: tuple[LogEntry, ...]
    connection: ConnectionStatus
    mission: MissionStatus


# ---------------------------------------- #


class TelemetrySession:
    """
    Owns the live telemetry state for one monitoring session:
     - latest sample
     - bounded sample history (trend charts)
     - bounded log of per-sample entries (inspection pane)
     - connection health and mission clock

    submit_sample() and tick() are the only mutators. Each holds a single
    lock for its whole effect set, and readers copy under the same lock.
    No scheduling happens here; see SessionWorker for the timers.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.config = config or SessionConfig()
        self._lock = threading.Lock()

        started = int(clock())
        self._current: Sample | None = None
        self._history: deque[Sample] = deque(maxlen=self.config.history_max)
        self._log: deque[LogEntry] = deque(maxlen=self.config.log_max)
        self._connection = ConnectionStatus(
            connected=True,
            last_update_ms=started,
            signal_strength_pct=self.config.signal_strength_pct,
        )
        self._mission = MissionStatus(
            launched=True,
            launch_ms=started,
            current_ms=started,
            phase=self.config.initial_phase,
        )

    # ---------------------------------------- #
    #  Mutators                                #
    # ---------------------------------------- #

    def submit_sample(self, sample: Sample) -> None:
        entry = LogEntry.for_sample(sample)
        with self._lock:
            was_connected = self._connection.connected
            self._current = sample
            self._history.append(sample)
            self._log.appendleft(entry)
            self._connection = replace(
                self._connection, connected=True, last_update_ms=sample.timestamp_ms
            )

        if not was_connected:
            logger.info("Telemetry link restored at %d", sample.timestamp_ms)

    # ---------------------------------------- #

    def tick(self, now: int) -> None:
        stale_for: int | None = None
        with self._lock:
            if now > self._mission.current_ms:
                self._mission = replace(self._mission, current_ms=int(now))

            current = self._current
            if (
                current is not None
                and self._connection.connected
                and now - current.timestamp_ms > self.config.stale_ms
            ):
                self._connection = replace(self._connection, connected=False)
                stale_for = now - current.timestamp_ms

        if stale_for is not None:
            logger.warning("Telemetry link stale: no sample for %d ms", stale_for)

    # ---------------------------------------- #

    def set_phase(self, phase: MissionPhase | str) -> None:
        try:
            phase = MissionPhase(phase)
        except ValueError as exc:
            raise ValidationError(f"unknown mission phase {phase!r}") from exc

        with self._lock:
            previous = self._mission.phase
            self._mission = replace(self._mission, phase=phase)

        if phase != previous:
            logger.info("Mission phase %s -> %s", previous.value, phase.value)

    # ---------------------------------------- #

    def set_signal_strength(self, pct: int | None) -> None:
        if pct is not None and (
            isinstance(pct, bool) or not isinstance(pct, int) or not 0 <= pct <= 100
        ):
            raise ValidationError(f"signal strength must be 0-100, got {pct!r}")

        with self._lock:
            self._connection = replace(self._connection, signal_strength_pct=pct)

    # ---------------------------------------- #
    #  Readers                                 #
    # ---------------------------------------- #

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                current=self._current,
                history=tuple(self._history),
                log=tuple(self._log),
                connection=self._connection,
                mission=self._mission,
            )

    @property
    def current(self) -> Sample | None:
        with self._lock:
            return self._current

    @property
    def history(self) -> tuple[Sample, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def log(self) -> tuple[LogEntry, ...]:
        with self._lock:
            return tuple(self._log)

    @property
    def connection(self) -> ConnectionStatus:
        with self._lock:
            return self._connection

    @property
    def mission(self) -> MissionStatus:
        with self._lock:
            return self._mission

    # ---------------------------------------- #

    def mission_duration_ms(self) -> int:
        mission = self.mission
        if not mission.launched or mission.launch_ms is None:
            return 0
        return max(0, mission.current_ms - mission.launch_ms)

    def export_history(self) -> str:
        return export.history_to_csv(self.history)
