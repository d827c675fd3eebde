from __future__ import annotations

from qr_attendance.data import AttendanceLedger, StudentDirectory
from qr_attendance.models import ClassRoster, RosterEntry, SessionDescriptor
from qr_attendance.services.errors import require_text
from qr_attendance.services.session_tokens import validate_descriptor

UNKNOWN_STUDENT_NAME = "Unknown"


class LiveRosterFeed:
    """Students present for a session, for consumers that poll.

    There is no server-side notion of an active session: whoever holds the
    descriptor decides how long to keep asking.
    """

    def __init__(self, directory: StudentDirectory, ledger: AttendanceLedger) -> None:
        self._directory = directory
        self._ledger = ledger

    def roster(self, subject: str, class_name: str, date: str) -> ClassRoster:
        descriptor = validate_descriptor(
            SessionDescriptor(
                subject=require_text(subject, "subject"),
                class_name=require_text(class_name, "class name"),
                date=require_text(date, "date"),
            )
        )

        # Ledger order is time ascending, then insertion order.
        records = self._ledger.find_by_subject_class_date(
            descriptor.subject, descriptor.class_name, descriptor.date
        )
        names = self._directory.get_names(record.reg_no for record in records)

        return ClassRoster(
            descriptor=descriptor,
            students=[
                RosterEntry(
                    reg_no=record.reg_no,
                    name=names.get(record.reg_no, UNKNOWN_STUDENT_NAME),
                    time=record.time,
                )
                for record in records
            ],
        )
