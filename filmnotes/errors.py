"""Centralised error codes, exceptions and user-facing error messages."""
from enum import Enum


class ErrorCode(str, Enum):
    DB_CONNECT     = "FN-DB01"
    DB_VACUUM      = "FN-DB02"
    DB_MIGRATE     = "FN-DB03"
    IO_BACKUP      = "FN-IO01"
    IO_RESTORE     = "FN-IO02"
    IO_EXPORT      = "FN-IO03"
    VAL_REQUIRED   = "FN-VAL01"
    VAL_NUMBER     = "FN-VAL02"
    VAL_DATE       = "FN-VAL03"
    VAL_REFERENCE  = "FN-VAL04"
    VAL_RANGE      = "FN-VAL05"
    CLOUD_UPLOAD   = "FN-CLD01"
    CLOUD_DOWNLOAD = "FN-CLD02"


_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.DB_CONNECT:     "Could not open the database. Restart the app and try again.",
    ErrorCode.DB_VACUUM:      "The database optimisation did not complete.",
    ErrorCode.DB_MIGRATE:     "The database could not be upgraded to the current version.",
    ErrorCode.IO_BACKUP:      "The backup file could not be written. Check available disk space.",
    ErrorCode.IO_RESTORE:     "The backup could not be restored. Your current data is unchanged.",
    ErrorCode.IO_EXPORT:      "The export file could not be written.",
    ErrorCode.VAL_REQUIRED:   "Please fill in all required fields.",
    ErrorCode.VAL_NUMBER:     "Please enter a valid number in that field.",
    ErrorCode.VAL_DATE:       "Please enter a date in YYYY-MM-DD HH:MM format.",
    ErrorCode.VAL_REFERENCE:  "The selected item no longer exists.",
    ErrorCode.VAL_RANGE:      "Please set both ends of the range in the right order.",
    ErrorCode.CLOUD_UPLOAD:   "The backup could not be uploaded to cloud storage.",
    ErrorCode.CLOUD_DOWNLOAD: "The backup could not be downloaded from cloud storage.",
}


def error_message(code: ErrorCode, *, detail: str = "") -> str:
    """Build the user-facing text for an error code."""
    base = _MESSAGES.get(code, "An unexpected error occurred.")
    return f"{base}{' ' + detail if detail else ''}\n\nReference: {code.value}"


class FilmNotesError(Exception):
    """Base class for errors raised by filmnotes itself."""

    def __init__(self, code: ErrorCode, detail: str = "") -> None:
        self.code = code
        self.detail = detail
        super().__init__(f"{code.value}: {detail}" if detail else code.value)

    @property
    def message(self) -> str:
        return error_message(self.code, detail=self.detail)


class ValidationError(FilmNotesError):
    """A record was rejected before reaching the database."""


class MigrationError(FilmNotesError):
    """The stored schema could not be brought to the current version."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(ErrorCode.DB_MIGRATE, detail)
