from __future__ import annotations

import argparse
import base64
import json
import logging
import queue
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Sequence

from qr_attendance.config import settings
from qr_attendance.data import Database
from qr_attendance.models import ClassRoster, Identity, Role, SessionDescriptor, Student, Teacher
from qr_attendance.services import (
    AttendanceError,
    AttendanceService,
    InternalError,
    QRScanner,
    ValidationError,
    decode_image,
)
from qr_attendance.utils import checked_in_at, current_date, format_relative_time

logger = logging.getLogger(__name__)

EXIT_CODES = {
    "internal": 1,
    "validation": 2,
    "not_found": 3,
    "forbidden": 4,
    "conflict": 5,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qr-attendance", description=settings.app_name)
    parser.add_argument("--database", type=Path, default=settings.database_path, help="SQLite database path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create or migrate the database schema")

    student = subparsers.add_parser("add-student", help="Enroll a student")
    student.add_argument("reg_no")
    student.add_argument("--name", required=True)
    student.add_argument("--class", dest="class_name", required=True)
    student.add_argument("--subject", dest="subjects", action="append", default=[])

    teacher = subparsers.add_parser("add-teacher", help="Register a teacher")
    teacher.add_argument("reg_no")
    teacher.add_argument("--name", required=True)
    teacher.add_argument("--subject", dest="subjects", action="append", default=[])
    teacher.add_argument("--class", dest="classes", action="append", default=[])

    issue = subparsers.add_parser("issue", help="Issue today's session QR code")
    issue.add_argument("--as-teacher", dest="teacher", required=True)
    issue.add_argument("--subject", required=True)
    issue.add_argument("--class", dest="class_name", required=True)
    issue.add_argument("--output", type=Path, default=Path("session-qr.png"))

    check_in = subparsers.add_parser("check-in", help="Mark attendance from a scanned session token")
    check_in.add_argument("--as-student", dest="student", required=True)
    source = check_in.add_mutually_exclusive_group(required=True)
    source.add_argument("--payload", help="Decoded QR text")
    source.add_argument("--image", type=Path, help="Image containing the session QR code")
    source.add_argument("--camera", action="store_true", help="Scan the session QR code with the camera")

    summary = subparsers.add_parser("summary", help="Show your attendance percentages")
    summary.add_argument("--as-student", dest="student", required=True)

    roster = subparsers.add_parser("roster", help="List students present for a session")
    roster.add_argument("--as-teacher", dest="teacher", required=True)
    roster.add_argument("--subject", required=True)
    roster.add_argument("--class", dest="class_name", required=True)
    roster.add_argument("--date", default=None, help="YYYY-MM-DD, defaults to today")
    roster.add_argument("--watch", action="store_true", help="Keep polling until interrupted")

    return parser


def _print_roster(roster: ClassRoster) -> None:
    now = datetime.now()
    descriptor = roster.descriptor
    print(f"{descriptor.subject} / {descriptor.class_name} on {descriptor.date}: {roster.total_present} present")
    for entry in roster.students:
        ago = format_relative_time(checked_in_at(descriptor.date, entry.time), now=now)
        print(f"  {entry.display_time}  {entry.reg_no:<12} {entry.name} ({ago})")


def _scan_with_camera() -> SessionDescriptor:
    scanned: queue.Queue[SessionDescriptor] = queue.Queue()
    errors: queue.Queue[str] = queue.Queue()
    scanner = QRScanner(camera_index=settings.qr_camera_index)

    if not scanner.start(scanned.put, on_error=errors.put):
        raise InternalError(errors.get_nowait() if not errors.empty() else "Camera scanner unavailable.")

    print("Point the camera at the session QR code (Ctrl+C to cancel)...")
    try:
        while True:
            if not errors.empty():
                raise InternalError(errors.get_nowait())
            try:
                return scanned.get(timeout=0.2)
            except queue.Empty:
                continue
    finally:
        scanner.stop()


def _check_in(service: AttendanceService, args: argparse.Namespace) -> None:
    identity = Identity(args.student, Role.STUDENT)
    if args.payload is not None:
        record = service.check_in_payload(identity, args.payload)
    elif args.camera:
        record = service.check_in(identity, _scan_with_camera())
    else:
        try:
            descriptors = decode_image(args.image)
        except OSError as exc:
            raise ValidationError(f"Cannot read image {args.image}: {exc}") from exc
        if not descriptors:
            raise ValidationError("No session QR code found in the image.")
        record = service.check_in(identity, descriptors[0])
    print(f"Attendance marked for {record.subject} at {record.display_time}")


def _roster(service: AttendanceService, args: argparse.Namespace) -> None:
    identity = Identity(args.teacher, Role.TEACHER)
    date = args.date or current_date(datetime.now())
    while True:
        _print_roster(service.get_class_roster(identity, args.subject, args.class_name, date))
        if not args.watch:
            return
        time.sleep(settings.roster_poll_seconds)


def run(args: argparse.Namespace) -> None:
    database = Database(args.database, timeout=settings.sqlite_timeout_seconds)
    service = AttendanceService(database, qr_box_size=settings.qr_box_size, qr_border=settings.qr_border)
    service.initialize()

    if args.command == "init-db":
        print(f"Database ready at {database.path}")
    elif args.command == "add-student":
        service.enroll_student(
            Student(args.reg_no, args.name, args.class_name, frozenset(args.subjects))
        )
        print(f"Enrolled student {args.reg_no}")
    elif args.command == "add-teacher":
        service.register_teacher(
            Teacher(args.reg_no, args.name, frozenset(args.subjects), frozenset(args.classes))
        )
        print(f"Registered teacher {args.reg_no}")
    elif args.command == "issue":
        issued = service.issue_session_token(Identity(args.teacher, Role.TEACHER), args.subject, args.class_name)
        encoded = issued.token.split(",", 1)[1]
        args.output.write_bytes(base64.b64decode(encoded))
        print(f"QR code written to {args.output}")
        print(issued.descriptor.to_payload())
    elif args.command == "check-in":
        _check_in(service, args)
    elif args.command == "summary":
        summary = service.get_student_summary(Identity(args.student, Role.STUDENT), args.student)
        print(json.dumps(summary.to_dict(), indent=2))
    elif args.command == "roster":
        _roster(service, args)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug(settings.describe())

    try:
        run(args)
    except AttendanceError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return EXIT_CODES.get(exc.kind, 1)
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
