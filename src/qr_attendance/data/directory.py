from __future__ import annotations

from typing import Iterable

from qr_attendance.data.database import Database
from qr_attendance.models import Student, Teacher


class DuplicateEnrollmentError(RuntimeError):
    """Raised when a student or teacher with the same registration number exists."""


class StudentDirectory:
    """Read access to enrolled students and teachers, plus enrollment helpers."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def add_student(self, student: Student) -> None:
        reg_no = student.reg_no.strip()
        with self._database.connect() as connection:
            existing = connection.execute(
                "SELECT reg_no FROM students WHERE reg_no = ?", (reg_no,)
            ).fetchone()
            if existing:
                raise DuplicateEnrollmentError(f"Student {reg_no} is already enrolled.")

            connection.execute(
                "INSERT INTO students (reg_no, name, class_name) VALUES (?, ?, ?)",
                (reg_no, student.name.strip(), student.class_name.strip()),
            )
            connection.executemany(
                "INSERT INTO student_subjects (reg_no, subject) VALUES (?, ?)",
                [(reg_no, subject.strip()) for subject in student.subjects],
            )

    def add_teacher(self, teacher: Teacher) -> None:
        reg_no = teacher.reg_no.strip()
        with self._database.connect() as connection:
            existing = connection.execute(
                "SELECT reg_no FROM teachers WHERE reg_no = ?", (reg_no,)
            ).fetchone()
            if existing:
                raise DuplicateEnrollmentError(f"Teacher {reg_no} already exists.")

            connection.execute(
                "INSERT INTO teachers (reg_no, name) VALUES (?, ?)",
                (reg_no, teacher.name.strip()),
            )
            connection.executemany(
                "INSERT INTO teacher_subjects (reg_no, subject) VALUES (?, ?)",
                [(reg_no, subject.strip()) for subject in teacher.subjects],
            )
            connection.executemany(
                "INSERT INTO teacher_classes (reg_no, class_name) VALUES (?, ?)",
                [(reg_no, class_name.strip()) for class_name in teacher.classes],
            )

    def get_student(self, reg_no: str) -> Student | None:
        with self._database.connect() as connection:
            row = connection.execute(
                "SELECT reg_no, name, class_name FROM students WHERE reg_no = ?",
                (reg_no,),
            ).fetchone()
            if not row:
                return None

            subjects = connection.execute(
                "SELECT subject FROM student_subjects WHERE reg_no = ? ORDER BY subject",
                (reg_no,),
            ).fetchall()

        return Student(
            reg_no=row["reg_no"],
            name=row["name"],
            class_name=row["class_name"],
            subjects=frozenset(item["subject"] for item in subjects),
        )

    def get_teacher(self, reg_no: str) -> Teacher | None:
        with self._database.connect() as connection:
            row = connection.execute(
                "SELECT reg_no, name FROM teachers WHERE reg_no = ?",
                (reg_no,),
            ).fetchone()
            if not row:
                return None

            subjects = connection.execute(
                "SELECT subject FROM teacher_subjects WHERE reg_no = ?", (reg_no,)
            ).fetchall()
            classes = connection.execute(
                "SELECT class_name FROM teacher_classes WHERE reg_no = ?", (reg_no,)
            ).fetchall()

        return Teacher(
            reg_no=row["reg_no"],
            name=row["name"],
            subjects=frozenset(item["subject"] for item in subjects),
            classes=frozenset(item["class_name"] for item in classes),
        )

    def get_names(self, reg_nos: Iterable[str]) -> dict[str, str]:
        wanted = sorted(set(reg_nos))
        if not wanted:
            return {}

        placeholders = ", ".join(["?"] * len(wanted))
        with self._database.connect() as connection:
            rows = connection.execute(
                f"SELECT reg_no, name FROM students WHERE reg_no IN ({placeholders})",
                tuple(wanted),
            ).fetchall()
        return {row["reg_no"]: row["name"] for row in rows}
