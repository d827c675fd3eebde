from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from qr_attendance.data import AttendanceLedger, StudentDirectory
from qr_attendance.models import AttendanceRecord, SessionDescriptor
from qr_attendance.services.errors import ConflictError, ForbiddenError, NotFoundError, require_text
from qr_attendance.services.session_tokens import validate_descriptor
from qr_attendance.utils import current_time_of_day

logger = logging.getLogger(__name__)


class CheckInValidator:
    def __init__(
        self,
        directory: StudentDirectory,
        ledger: AttendanceLedger,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._directory = directory
        self._ledger = ledger
        self._clock = clock

    def check_in(self, reg_no: str, descriptor: SessionDescriptor) -> AttendanceRecord:
        """Record that ``reg_no`` attended the session named by ``descriptor``.

        The descriptor's class is stored as given; it is not compared with
        the student's own class. Raises ``NotFoundError`` for an unknown
        student, ``ForbiddenError`` when the subject is not among the
        student's enrollments and ``ConflictError`` when attendance for the
        same subject and date already exists.
        """
        reg_no = require_text(reg_no, "registration number")
        descriptor = validate_descriptor(descriptor)

        student = self._directory.get_student(reg_no)
        if student is None:
            logger.warning("Check-in rejected: student %s not found", reg_no)
            raise NotFoundError("Student not found.")

        if not student.is_enrolled(descriptor.subject):
            logger.warning("Check-in rejected: %s is not enrolled in %s", reg_no, descriptor.subject)
            raise ForbiddenError("You are not enrolled in this subject.")

        record = self._ledger.insert_if_absent(
            reg_no=student.reg_no,
            subject=descriptor.subject,
            class_name=descriptor.class_name,
            date=descriptor.date,
            time=current_time_of_day(self._clock()),
        )
        if record is None:
            logger.warning(
                "Check-in rejected: %s already marked for %s on %s",
                reg_no,
                descriptor.subject,
                descriptor.date,
            )
            raise ConflictError("Attendance already marked for this subject today.")

        logger.info(
            "Checked in %s for %s / %s on %s at %s",
            record.reg_no,
            record.subject,
            record.class_name,
            record.date,
            record.time,
        )
        return record
