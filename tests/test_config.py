"""Tests for session configuration loading."""

from __future__ import annotations

from pathlib import Path

from cansatlog.telemetry.sample import MissionPhase
from cansatlog.util.config import SessionConfig, load_session_config


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    """Ensure a missing config file is not an error."""
    assert load_session_config(tmp_path / "absent.toml") == SessionConfig()


def test_missing_table_yields_defaults(tmp_path: Path) -> None:
    """Ensure files without a [session] table fall back to defaults."""
    path: Path = tmp_path / "telemetry.toml"
    path.write_text('[other]\nhistory_max = 3\n', encoding="utf-8")
    assert load_session_config(path) == SessionConfig()


def test_values_are_read(tmp_path: Path) -> None:
    """Ensure every key is applied."""
    path: Path = tmp_path / "telemetry.toml"
    path.write_text(
        "[session]\n"
        "history_max = 10\n"
        "log_max = 5\n"
        "stale_ms = 2500\n"
        "tick_interval_ms = 500\n"
        "sample_interval_ms = 250\n"
        "signal_strength_pct = 40\n"
        'initial_phase = "pre-launch"\n',
        encoding="utf-8",
    )
    cfg: SessionConfig = load_session_config(path)
    assert cfg == SessionConfig(
        history_max=10,
        log_max=5,
        stale_ms=2500,
        tick_interval_ms=500,
        sample_interval_ms=250,
        signal_strength_pct=40,
        initial_phase=MissionPhase.PRE_LAUNCH,
    )


def test_invalid_values_are_ignored(tmp_path: Path) -> None:
    """Ensure badly typed or out-of-range keys keep their defaults."""
    path: Path = tmp_path / "telemetry.toml"
    path.write_text(
        "[session]\n"
        'history_max = "lots"\n'
        "log_max = 0\n"
        "stale_ms = -5\n"
        "tick_interval_ms = true\n"
        "signal_strength_pct = 150\n"
        'initial_phase = "orbit"\n',
        encoding="utf-8",
    )
    assert load_session_config(path) == SessionConfig()


def test_repo_config_matches_defaults() -> None:
    """Ensure the shipped telemetry.toml mirrors the built-in defaults."""
    assert load_session_config() == SessionConfig()
