from __future__ import annotations

from collections import Counter

from qr_attendance.data import AttendanceLedger, StudentDirectory
from qr_attendance.models import StudentSummary, SubjectAttendance
from qr_attendance.services.errors import NotFoundError, require_text


def attendance_percentage(attended: int, total_classes: int) -> float:
    return round(attended / total_classes * 100, 2)


class PercentageAggregator:
    """Per-subject attendance ratios derived from the ledger; read only.

    A class counts as held on a date when anyone checked in for the subject
    that day. Sessions nobody attended are therefore invisible, and a subject
    with no recorded sessions reports 0% against a denominator of 1.
    """

    def __init__(self, directory: StudentDirectory, ledger: AttendanceLedger) -> None:
        self._directory = directory
        self._ledger = ledger

    def subject_attendance(self, attended: int, subject: str) -> SubjectAttendance:
        total_classes = len(self._ledger.distinct_dates(subject)) or 1
        return SubjectAttendance(
            attended=attended,
            total_classes=total_classes,
            percentage=attendance_percentage(attended, total_classes),
        )

    def summarize(self, reg_no: str) -> StudentSummary:
        reg_no = require_text(reg_no, "registration number")
        student = self._directory.get_student(reg_no)
        if student is None:
            raise NotFoundError("Student not found.")

        attended_by_subject = Counter(record.subject for record in self._ledger.find_by_student(reg_no))

        summary = StudentSummary(reg_no=student.reg_no, name=student.name, class_name=student.class_name)
        for subject in sorted(student.subjects):
            summary.subjects[subject] = self.subject_attendance(attended_by_subject[subject], subject)
        return summary
