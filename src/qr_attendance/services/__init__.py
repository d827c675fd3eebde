from .aggregator import PercentageAggregator, attendance_percentage
from .attendance_service import AttendanceService
from .check_in import CheckInValidator
from .errors import (
    AttendanceError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from .qr_scanner import QRScanner, decode_image
from .roster_feed import LiveRosterFeed
from .session_tokens import SessionTokenGenerator, parse_descriptor, render_qr_data_url

__all__ = [
    "AttendanceError",
    "AttendanceService",
    "CheckInValidator",
    "ConflictError",
    "ForbiddenError",
    "InternalError",
    "LiveRosterFeed",
    "NotFoundError",
    "PercentageAggregator",
    "QRScanner",
    "SessionTokenGenerator",
    "ValidationError",
    "attendance_percentage",
    "decode_image",
    "parse_descriptor",
    "render_qr_data_url",
]
