from __future__ import annotations

from datetime import date, datetime

ISO_DATE_FORMAT = "%Y-%m-%d"
TIME_OF_DAY_FORMAT = "%H:%M:%S"
DISPLAY_TIME_FORMAT = "%I:%M %p"


class InvalidDate(ValueError):
    pass


def current_date(now: datetime) -> str:
    return now.date().isoformat()


def current_time_of_day(now: datetime) -> str:
    return now.strftime(TIME_OF_DAY_FORMAT)


def parse_iso_date(value: str) -> date:
    """Parse a calendar date written as year-month-day with dashes."""

    try:
        return datetime.strptime(value.strip(), ISO_DATE_FORMAT).date()
    except (AttributeError, ValueError) as exc:
        raise InvalidDate(f"Date must be in YYYY-MM-DD format, got {value!r}.") from exc


def format_display_time(value: str) -> str:
    """Render a stored ``HH:MM:SS`` time of day as ``hh:MM AM/PM``."""

    try:
        moment = datetime.strptime(value, TIME_OF_DAY_FORMAT)
    except ValueError:
        return value
    return moment.strftime(DISPLAY_TIME_FORMAT)


def _coerce_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value

    if isinstance(value, str):
        candidate = value.strip().replace(" ", "T", 1)
        try:
            return datetime.fromisoformat(candidate)
        except ValueError:
            pass

    raise ValueError(f"Unsupported datetime value: {value!r}")


def checked_in_at(day: str, time_of_day: str) -> datetime:
    return _coerce_datetime(f"{day} {time_of_day}")


def format_relative_time(value: datetime | str, *, now: datetime | None = None) -> str:
    reference = now or datetime.now()
    moment = _coerce_datetime(value)

    total_seconds = int((reference - moment).total_seconds())
    if total_seconds < 60:
        return "just now"

    minutes = total_seconds // 60
    if minutes == 1:
        return "1 minute ago"
    if minutes < 60:
        return f"{minutes} minutes ago"

    hours = minutes // 60
    if hours == 1:
        return "1 hour ago"
    if hours < 24:
        return f"{hours} hours ago"

    days = hours // 24
    if days == 1:
        return "Yesterday"
    return f"{days} days ago"
