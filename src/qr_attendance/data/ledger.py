from __future__ import annotations

import logging
import sqlite3

from qr_attendance.data.database import Database
from qr_attendance.models import AttendanceRecord

logger = logging.getLogger(__name__)

_RECORD_COLUMNS = "id, reg_no, subject, class_name, date, time"


def _to_record(row: sqlite3.Row) -> AttendanceRecord:
    return AttendanceRecord(
        id=int(row["id"]),
        reg_no=row["reg_no"],
        subject=row["subject"],
        class_name=row["class_name"],
        date=row["date"],
        time=row["time"],
    )


class AttendanceLedger:
    """Append-only store of check-in events.

    There is no update or delete method, and the schema backs this
    with triggers that abort any UPDATE or DELETE on ``attendance_records``.
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    def insert_if_absent(
        self,
        *,
        reg_no: str,
        subject: str,
        class_name: str,
        date: str,
        time: str,
    ) -> AttendanceRecord | None:
        """Insert a record unless one already exists for (reg_no, subject, date).

        The uniqueness check is the table's UNIQUE constraint, so the
        decision and the write happen in one statement. Returns the new
        record, or ``None`` when the key is already taken.
        """
        with self._database.connect() as connection:
            try:
                cursor = connection.execute(
                    """
                    INSERT INTO attendance_records (reg_no, subject, class_name, date, time)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (reg_no, subject, class_name, date, time),
                )
            except sqlite3.IntegrityError as exc:
                if "UNIQUE" not in str(exc).upper():
                    raise
                logger.debug("Ledger key taken: %s/%s/%s", reg_no, subject, date)
                return None

            record_id = int(cursor.lastrowid)

        return AttendanceRecord(
            id=record_id,
            reg_no=reg_no,
            subject=subject,
            class_name=class_name,
            date=date,
            time=time,
        )

    def find_by_student(self, reg_no: str) -> list[AttendanceRecord]:
        with self._database.connect() as connection:
            rows = connection.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                  FROM attendance_records
                 WHERE reg_no = ?
              ORDER BY date ASC, time ASC, id ASC
                """,
                (reg_no,),
            ).fetchall()
        return [_to_record(row) for row in rows]

    def find_by_subject_class_date(self, subject: str, class_name: str, date: str) -> list[AttendanceRecord]:
        with self._database.connect() as connection:
            rows = connection.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                  FROM attendance_records
                 WHERE subject = ?
                   AND class_name = ?
                   AND date = ?
              ORDER BY time ASC, id ASC
                """,
                (subject, class_name, date),
            ).fetchall()
        return [_to_record(row) for row in rows]

    def distinct_dates(self, subject: str) -> set[str]:
        with self._database.connect() as connection:
            rows = connection.execute(
                "SELECT DISTINCT date FROM attendance_records WHERE subject = ?",
                (subject,),
            ).fetchall()
        return {row["date"] for row in rows}
