from .attendance import (
    AttendanceRecord,
    ClassRoster,
    IssuedToken,
    RosterEntry,
    SessionDescriptor,
    StudentSummary,
    SubjectAttendance,
)
from .people import Identity, Role, Student, Teacher

__all__ = [
    "AttendanceRecord",
    "ClassRoster",
    "Identity",
    "IssuedToken",
    "Role",
    "RosterEntry",
    "SessionDescriptor",
    "Student",
    "StudentSummary",
    "SubjectAttendance",
    "Teacher",
]
