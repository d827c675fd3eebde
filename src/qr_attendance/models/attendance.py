from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from qr_attendance.utils.time import format_display_time


@dataclass(frozen=True, slots=True)
class SessionDescriptor:
    """The {subject, class, date} triple carried inside a session token."""

    subject: str
    class_name: str
    date: str

    @classmethod
    def for_day(cls, subject: str, class_name: str, day: date) -> "SessionDescriptor":
        return cls(subject=subject.strip(), class_name=class_name.strip(), date=day.isoformat())

    def to_dict(self) -> dict[str, str]:
        return {"subject": self.subject, "class": self.class_name, "date": self.date}

    def to_payload(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class AttendanceRecord:
    id: int
    reg_no: str
    subject: str
    class_name: str
    date: str
    time: str

    @property
    def display_time(self) -> str:
        return format_display_time(self.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "regNo": self.reg_no,
            "subject": self.subject,
            "class": self.class_name,
            "date": self.date,
            "time": self.time,
        }


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    descriptor: SessionDescriptor

    def to_dict(self) -> dict[str, Any]:
        return {"qrCode": self.token, "qrData": self.descriptor.to_dict()}


@dataclass(frozen=True, slots=True)
class SubjectAttendance:
    attended: int
    total_classes: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "attended": self.attended,
            "totalClasses": self.total_classes,
            "percentage": self.percentage,
        }


@dataclass(slots=True)
class StudentSummary:
    reg_no: str
    name: str
    class_name: str
    subjects: dict[str, SubjectAttendance] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "regNo": self.reg_no,
            "name": self.name,
            "class": self.class_name,
            "subjects": {subject: item.to_dict() for subject, item in self.subjects.items()},
        }


@dataclass(frozen=True, slots=True)
class RosterEntry:
    reg_no: str
    name: str
    time: str

    @property
    def display_time(self) -> str:
        return format_display_time(self.time)

    def to_dict(self) -> dict[str, str]:
        return {"regNo": self.reg_no, "name": self.name, "time": self.time}


@dataclass(slots=True)
class ClassRoster:
    descriptor: SessionDescriptor
    students: list[RosterEntry] = field(default_factory=list)

    @property
    def total_present(self) -> int:
        return len(self.students)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.descriptor.to_dict(),
            "totalPresent": self.total_present,
            "students": [entry.to_dict() for entry in self.students],
        }
