from __future__ import annotations

import sqlite3

import pytest

from qr_attendance.models import Identity, Role, SessionDescriptor, Student, Teacher
from qr_attendance.services import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ValidationError,
)

TEACHER = Identity("T1", Role.TEACHER)
S1 = Identity("S1", Role.STUDENT)
S2 = Identity("S2", Role.STUDENT)


def test_attendance_scenario(service, clock) -> None:
    issued = service.issue_session_token(TEACHER, "Math", "ClassA")
    assert issued.descriptor == SessionDescriptor("Math", "ClassA", "2024-01-10")

    record = service.check_in_payload(S1, issued.descriptor.to_payload())
    assert record.time == "09:01:00"

    roster = service.get_class_roster(TEACHER, "Math", "ClassA", "2024-01-10")
    assert roster.total_present == 1
    assert roster.students[0].reg_no == "S1"

    with pytest.raises(ConflictError) as conflict:
        service.check_in(S1, issued.descriptor)
    assert conflict.value.kind == "conflict"

    with pytest.raises(ForbiddenError):
        service.check_in(S2, issued.descriptor)

    math = service.get_student_summary(S1, "S1").subjects["Math"]
    assert (math.attended, math.total_classes, math.percentage) == (1, 1, 100.0)


def test_roles_are_enforced_per_operation(service) -> None:
    descriptor = SessionDescriptor("Math", "ClassA", "2024-01-10")

    with pytest.raises(ForbiddenError):
        service.issue_session_token(S1, "Math", "ClassA")
    with pytest.raises(ForbiddenError):
        service.check_in(TEACHER, descriptor)
    with pytest.raises(ForbiddenError):
        service.get_student_summary(TEACHER, "S1")
    with pytest.raises(ForbiddenError):
        service.get_class_roster(S1, "Math", "ClassA", "2024-01-10")


def test_students_only_see_their_own_summary(service) -> None:
    with pytest.raises(ForbiddenError):
        service.get_student_summary(S2, "S1")


def test_check_in_uses_identity_reg_no(service) -> None:
    with pytest.raises(NotFoundError):
        service.check_in(Identity("S404", Role.STUDENT), SessionDescriptor("Math", "ClassA", "2024-01-10"))


def test_storage_failures_surface_as_internal(service, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(service.ledger, "insert_if_absent", broken)

    with pytest.raises(InternalError) as excinfo:
        service.check_in(S1, SessionDescriptor("Math", "ClassA", "2024-01-10"))

    assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)
    assert excinfo.value.to_dict() == {
        "success": False,
        "kind": "internal",
        "message": "Error marking attendance.",
    }


def test_unregistered_teacher_is_not_found(service) -> None:
    stranger = Identity("T404", Role.TEACHER)

    with pytest.raises(NotFoundError):
        service.issue_session_token(stranger, "Math", "ClassA")
    with pytest.raises(NotFoundError):
        service.get_class_roster(stranger, "Math", "ClassA", "2024-01-10")


def test_registered_teacher_is_read_back_with_assignments(service) -> None:
    teacher = service.directory.get_teacher("T1")

    assert teacher == Teacher(
        reg_no="T1", name="Dr. Mehta", subjects=frozenset({"Math"}), classes=frozenset({"ClassA"})
    )
    assert service.directory.get_teacher("T404") is None


def test_role_is_checked_before_payload_is_parsed(service) -> None:
    with pytest.raises(ForbiddenError):
        service.check_in_payload(TEACHER, "not a token")
    with pytest.raises(ValidationError):
        service.check_in_payload(S1, "not a token")


def test_unexpected_failures_surface_as_internal(service, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(service.ledger, "distinct_dates", broken)

    with pytest.raises(InternalError) as excinfo:
        service.get_student_summary(S1, "S1")

    assert excinfo.value.kind == "internal"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_duplicate_enrollment_is_a_conflict(service, monkeypatch) -> None:
    with pytest.raises(ConflictError):
        service.enroll_student(Student(reg_no="S1", name="Again", class_name="ClassA"))
    with pytest.raises(ConflictError):
        service.register_teacher(Teacher(reg_no="T1", name="Again"))

    def racing_insert(student):
        raise sqlite3.IntegrityError("UNIQUE constraint failed: students.reg_no")

    monkeypatch.setattr(service.directory, "add_student", racing_insert)
    with pytest.raises(ConflictError):
        service.enroll_student(Student(reg_no="S9", name="Late Comer", class_name="ClassA"))
