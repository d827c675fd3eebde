from __future__ import annotations

from pathlib import Path

from qr_attendance.config import load_settings


def test_load_settings_reads_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("APP_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("DATABASE_PATH", raising=False)
    monkeypatch.setenv("ROSTER_POLL_SECONDS", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    loaded = load_settings()

    assert loaded.database_path == Path(tmp_path) / "attendance.db"
    assert loaded.roster_poll_seconds == 2.5
    assert loaded.log_level == "DEBUG"
    assert f"database_path={loaded.database_path}" in loaded.describe()
