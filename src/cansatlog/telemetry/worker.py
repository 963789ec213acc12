import logging
from typing import Callable

from PySide6 import QtCore

from cansatlog.telemetry.sample import Sample
from cansatlog.telemetry.session import TelemetrySession
from cansatlog.util.time import now_ms

logger = logging.getLogger(__name__)


class SessionWorker(QtCore.QObject):
    """
    Drives a TelemetrySession from the Qt event loop.

    Two independent timers:
    - ingestion: pulls one sample from `source` per interval (optional;
      external producers may call submit() instead)
    - tick: re-evaluates staleness and the mission clock

    stop() cancels both before the session is torn down.
    """

    updated = QtCore.Signal(object)
    connection = QtCore.Signal(bool)
    error = QtCore.Signal(str)
    info = QtCore.Signal(str)

    def __init__(
        self,
        session: TelemetrySession,
        source: Callable[[], Sample] | None = None,
        clock: Callable[[], int] = now_ms,
        parent=None,
    ):
        super().__init__(parent)
        self._session = session
        self._source = source
        self._clock = clock
        self._running = False
        self._last_connected = session.connection.connected

        cfg = session.config

        self._sample_timer = QtCore.QTimer(self)
        self._sample_timer.setInterval(cfg.sample_interval_ms)
        self._sample_timer.timeout.connect(self.poll)

        self._tick_timer = QtCore.QTimer(self)
        self._tick_timer.setInterval(cfg.tick_interval_ms)
        self._tick_timer.timeout.connect(self.tick)

    # ---------------------------------------- #

    @property
    def session(self) -> TelemetrySession:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._running

    # ---------------------------------------- #

    @QtCore.Slot()
    def start(self) -> None:
        if self._running:
            return
        self._running = True
        if self._source is not None:
            self._sample_timer.start()
        self._tick_timer.start()
        logger.info("Session worker started")
        self.info.emit("Telemetry session started")

    # ---------------------------------------- #

    @QtCore.Slot()
    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._sample_timer.stop()
        self._tick_timer.stop()
        logger.info("Session worker stopped")
        self.info.emit("Telemetry session stopped")

    # ---------------------------------------- #

    @QtCore.Slot()
    def poll(self) -> None:
        if not self._running or self._source is None:
            return

        try:
            sample = self._source()
        except Exception as e:
            # A bad reading is reported, the session keeps going.
            logger.error("Telemetry source failed: %s", e)
            self.error.emit(f"Telemetry source failed: {e}")
            return

        self.submit(sample)

    # ---------------------------------------- #

    @QtCore.Slot(object)
    def submit(self, sample: Sample) -> None:
        self._session.submit_sample(sample)
        self._publish()

    # ---------------------------------------- #

    @QtCore.Slot()
    def tick(self) -> None:
        if not self._running:
            return
        self._session.tick(int(self._clock()))
        self._publish()

    # ---------------------------------------- #

    def _publish(self) -> None:
        snap = self._session.snapshot()
        connected = snap.connection.connected
        if connected != self._last_connected:
            self._last_connected = connected
            self.connection.emit(connected)
            if connected:
                self.info.emit("Telemetry link restored")
            else:
                self.error.emit("Telemetry link lost")
        self.updated.emit(snap)
