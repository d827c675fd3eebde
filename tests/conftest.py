from __future__ import annotations

from datetime import datetime

import pytest

from qr_attendance.data import Database
from qr_attendance.models import Student, Teacher
from qr_attendance.services import AttendanceService


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 10, 9, 1, 0))


@pytest.fixture
def database(tmp_path) -> Database:
    database = Database(tmp_path / "attendance.db")
    database.initialize()
    return database


@pytest.fixture
def service(database, clock) -> AttendanceService:
    service = AttendanceService(database, clock=clock)
    service.directory.add_student(
        Student(reg_no="S1", name="Asha Rao", class_name="ClassA", subjects=frozenset({"Math", "Physics"}))
    )
    service.directory.add_student(
        Student(reg_no="S2", name="Ben Okafor", class_name="ClassA", subjects=frozenset({"Physics"}))
    )
    service.directory.add_student(
        Student(reg_no="S3", name="Chen Li", class_name="ClassB", subjects=frozenset({"Math"}))
    )
    service.directory.add_teacher(
        Teacher(reg_no="T1", name="Dr. Mehta", subjects=frozenset({"Math"}), classes=frozenset({"ClassA"}))
    )
    return service
