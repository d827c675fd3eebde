from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator

from qr_attendance.data import AttendanceLedger, Database, DuplicateEnrollmentError, StudentDirectory
from qr_attendance.models import (
    AttendanceRecord,
    ClassRoster,
    Identity,
    IssuedToken,
    Role,
    SessionDescriptor,
    Student,
    StudentSummary,
    Teacher,
)
from qr_attendance.services.aggregator import PercentageAggregator
from qr_attendance.services.check_in import CheckInValidator
from qr_attendance.services.errors import (
    AttendanceError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
)
from qr_attendance.services.roster_feed import LiveRosterFeed
from qr_attendance.services.session_tokens import SessionTokenGenerator, parse_descriptor

logger = logging.getLogger(__name__)


class AttendanceService:
    """Entry point for the four attendance operations.

    Every call carries an ``Identity`` already verified by the auth service;
    the role claim is trusted and only checked against the operation.
    """

    def __init__(
        self,
        database: Database,
        *,
        clock: Callable[[], datetime] = datetime.now,
        qr_box_size: int = 10,
        qr_border: int = 4,
    ) -> None:
        self._database = database
        self.directory = StudentDirectory(database)
        self.ledger = AttendanceLedger(database)
        self._tokens = SessionTokenGenerator(box_size=qr_box_size, border=qr_border, clock=clock)
        self._validator = CheckInValidator(self.directory, self.ledger, clock=clock)
        self._aggregator = PercentageAggregator(self.directory, self.ledger)
        self._roster = LiveRosterFeed(self.directory, self.ledger)

    def initialize(self) -> None:
        self._database.initialize()

    def enroll_student(self, student: Student) -> None:
        with _internal_errors("enrolling student"):
            try:
                self.directory.add_student(student)
            except (DuplicateEnrollmentError, sqlite3.IntegrityError) as exc:
                raise ConflictError(f"Student {student.reg_no} is already enrolled.") from exc

    def register_teacher(self, teacher: Teacher) -> None:
        with _internal_errors("registering teacher"):
            try:
                self.directory.add_teacher(teacher)
            except (DuplicateEnrollmentError, sqlite3.IntegrityError) as exc:
                raise ConflictError(f"Teacher {teacher.reg_no} is already registered.") from exc

    def issue_session_token(self, identity: Identity, subject: str, class_name: str) -> IssuedToken:
        _require_role(identity, Role.TEACHER)
        with _internal_errors("generating QR code"):
            self._require_registered_teacher(identity)
            return self._tokens.issue(subject, class_name)

    def check_in(self, identity: Identity, descriptor: SessionDescriptor) -> AttendanceRecord:
        _require_role(identity, Role.STUDENT)
        with _internal_errors("marking attendance"):
            return self._validator.check_in(identity.reg_no, descriptor)

    def check_in_payload(self, identity: Identity, payload: str) -> AttendanceRecord:
        _require_role(identity, Role.STUDENT)
        return self.check_in(identity, parse_descriptor(payload))

    def get_student_summary(self, identity: Identity, reg_no: str) -> StudentSummary:
        _require_role(identity, Role.STUDENT)
        if identity.reg_no != reg_no:
            raise ForbiddenError("Students may only view their own attendance.")
        with _internal_errors("fetching attendance data"):
            return self._aggregator.summarize(reg_no)

    def get_class_roster(self, identity: Identity, subject: str, class_name: str, date: str) -> ClassRoster:
        _require_role(identity, Role.TEACHER)
        with _internal_errors("fetching class attendance"):
            self._require_registered_teacher(identity)
            return self._roster.roster(subject, class_name, date)

    def _require_registered_teacher(self, identity: Identity) -> None:
        if self.directory.get_teacher(identity.reg_no) is None:
            logger.warning("Rejected request from unregistered teacher %s", identity.reg_no)
            raise NotFoundError("Teacher not found.")


def _require_role(identity: Identity, role: Role) -> None:
    if identity.role != role:
        raise ForbiddenError(f"This operation is only available to the {role.value} role.")


@contextmanager
def _internal_errors(action: str) -> Iterator[None]:
    try:
        yield
    except AttendanceError:
        raise
    except sqlite3.Error as exc:
        logger.error("Storage failure while %s", action, exc_info=exc)
        raise InternalError(f"Error {action}.") from exc
    except Exception as exc:
        logger.error("Unexpected failure while %s", action, exc_info=exc)
        raise InternalError(f"Error {action}.") from exc
