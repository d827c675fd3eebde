from .database import Database
from .directory import DuplicateEnrollmentError, StudentDirectory
from .ledger import AttendanceLedger

__all__ = ["AttendanceLedger", "Database", "DuplicateEnrollmentError", "StudentDirectory"]
