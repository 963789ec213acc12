# cansatlog/app.py

import argparse
import logging
import signal
import sys
from pathlib import Path

from PySide6 import QtCore

from cansatlog.telemetry.export import export_filename, history_series
from cansatlog.telemetry.sample import altitude_trend, log_preview, orientation_preview
from cansatlog.telemetry.session import SessionSnapshot, TelemetrySession
from cansatlog.telemetry.simulator import TelemetrySimulator
from cansatlog.telemetry.worker import SessionWorker
from cansatlog.util.config import load_session_config
from cansatlog.util.time import format_clock_time, format_duration, now_ms

logger = logging.getLogger("cansatlog")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="CanSat base-station telemetry monitor")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to telemetry.toml (default: repo root telemetry.toml)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until Ctrl+C)",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        help="Write the history CSV here on exit (file or directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


# ---------------------------------------- #


def format_status(snap: SessionSnapshot, duration_ms: int) -> str:
    link = "CONNECTED" if snap.connection.connected else "DISCONNECTED"
    if snap.connection.connected and snap.connection.signal_strength_pct is not None:
        link += f" {snap.connection.signal_strength_pct}%"

    parts = [f"T+ {format_duration(duration_ms)}", snap.mission.phase.value, link]
    if snap.log:
        latest = snap.log[0]
        parts.append(format_clock_time(latest.timestamp_ms))
        parts.append(log_preview(latest))
        parts.append(orientation_preview(latest))
        parts.append(f"TREND: {altitude_trend(latest.sample)}")
        peak = float(history_series(snap.history).altitude_m.max())
        parts.append(f"PEAK: {peak:.1f}m")
    else:
        parts.append("No telemetry data received yet...")
    return " | ".join(parts)


# ---------------------------------------- #


def write_export(session: TelemetrySession, target: Path) -> Path:
    if target.is_dir():
        target = target / export_filename(now_ms())
    target.write_text(session.export_history() + "\n", encoding="utf-8")
    return target


# ---------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    """
    Console entry point.

    Responsibilities:
    - Load session config
    - Create QCoreApplication
    - Wire a simulated producer and the session worker
    - Run the Qt event loop until Ctrl+C or --duration
    - Optionally export the history CSV on exit
    """
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_session_config(args.config)

    app = QtCore.QCoreApplication(sys.argv[:1])
    app.setApplicationName("CanSatLog")

    session = TelemetrySession(cfg)
    worker = SessionWorker(session, source=TelemetrySimulator().sample)
    worker.updated.connect(
        lambda snap: print(format_status(snap, session.mission_duration_ms()), flush=True)
    )
    worker.error.connect(lambda msg: logger.error("%s", msg))
    worker.info.connect(lambda msg: logger.info("%s", msg))

    # Ctrl+C quits the loop; the tick timer gives Python a chance to run the handler.
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    if args.duration is not None:
        QtCore.QTimer.singleShot(int(args.duration * 1000), app.quit)

    worker.start()
    try:
        rc = app.exec()
    finally:
        worker.stop()

    if args.export is not None:
        try:
            path = write_export(session, args.export)
        except OSError as e:
            logger.error("Failed to export telemetry: %s", e)
            return 1
        logger.info("Telemetry exported to %s", path)

    return rc


if __name__ == "__main__":
    raise SystemExit(main())
