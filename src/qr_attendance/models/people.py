from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


@dataclass(frozen=True, slots=True)
class Identity:
    """A verified caller as supplied by the external auth service."""

    reg_no: str
    role: Role


@dataclass(slots=True)
class Student:
    reg_no: str
    name: str
    class_name: str
    subjects: frozenset[str] = field(default_factory=frozenset)

    def is_enrolled(self, subject: str) -> bool:
        return subject in self.subjects


@dataclass(slots=True)
class Teacher:
    reg_no: str
    name: str
    subjects: frozenset[str] = field(default_factory=frozenset)
    classes: frozenset[str] = field(default_factory=frozenset)
