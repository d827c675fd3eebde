from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[3]
ENV_PATH = BASE_DIR / ".env"
load_dotenv(ENV_PATH)

APP_NAME = os.getenv("APP_NAME", "QR Attendance System")
DEFAULT_APP_DATA_DIR = Path.home() / ".qr-attendance"


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_data_dir: Path
    database_path: Path
    qr_camera_index: int = 0
    qr_box_size: int = 10
    qr_border: int = 4
    roster_poll_seconds: float = 5.0
    sqlite_timeout_seconds: float = 5.0
    log_level: str = "INFO"

    def describe(self) -> str:
        return (
            f"Settings(app_name={self.app_name}, "
            f"database_path={self.database_path}, "
            f"qr_camera_index={self.qr_camera_index}, "
            f"roster_poll_seconds={self.roster_poll_seconds}, "
            f"log_level={self.log_level})"
        )


def load_settings() -> Settings:
    """Build settings from the process environment (after ``.env`` is loaded)."""

    app_data_dir = Path(os.getenv("APP_DATA_DIR", str(DEFAULT_APP_DATA_DIR))).expanduser()
    return Settings(
        app_name=APP_NAME,
        app_data_dir=app_data_dir,
        database_path=Path(os.getenv("DATABASE_PATH", str(app_data_dir / "attendance.db"))).expanduser(),
        qr_camera_index=int(os.getenv("QR_CAMERA_INDEX", "0")),
        qr_box_size=int(os.getenv("QR_BOX_SIZE", "10")),
        qr_border=int(os.getenv("QR_BORDER", "4")),
        roster_poll_seconds=float(os.getenv("ROSTER_POLL_SECONDS", "5")),
        sqlite_timeout_seconds=float(os.getenv("SQLITE_TIMEOUT_SECONDS", "5")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


settings = load_settings()
