from __future__ import annotations

from typing import Any


class AttendanceError(Exception):
    """Base for every failure surfaced to callers of the attendance core."""

    kind = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "kind": self.kind, "message": self.message}


class ValidationError(AttendanceError):
    """A required field is missing, empty or malformed."""

    kind = "validation"


class NotFoundError(AttendanceError):
    kind = "not_found"


class ForbiddenError(AttendanceError):
    """The caller may not perform this operation, or is not enrolled in the subject."""

    kind = "forbidden"


class ConflictError(AttendanceError):
    """Attendance already exists for this student, subject and date."""

    kind = "conflict"


class InternalError(AttendanceError):
    kind = "internal"


def require_text(value: object, field_name: str) -> str:
    """Return the stripped string value or raise ``ValidationError``."""

    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Please provide {field_name}.")
    return value.strip()
