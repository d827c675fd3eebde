from .time import (
    InvalidDate,
    checked_in_at,
    current_date,
    current_time_of_day,
    format_display_time,
    format_relative_time,
    parse_iso_date,
)

__all__ = [
    "InvalidDate",
    "checked_in_at",
    "current_date",
    "current_time_of_day",
    "format_display_time",
    "format_relative_time",
    "parse_iso_date",
]
