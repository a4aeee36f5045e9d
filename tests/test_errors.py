"""Tests for filmnotes.errors: ErrorCode enum, messages and exceptions."""

import pytest

from filmnotes.errors import (
    ErrorCode,
    FilmNotesError,
    MigrationError,
    ValidationError,
    _MESSAGES,
    error_message,
)


class TestErrorCode:
    def test_all_codes_have_fn_prefix(self):
        for code in ErrorCode:
            assert code.value.startswith("FN-"), f"{code} missing FN- prefix"

    def test_all_codes_have_messages(self):
        for code in ErrorCode:
            assert code in _MESSAGES, f"{code} missing from _MESSAGES"

    def test_values_are_unique(self):
        values = [c.value for c in ErrorCode]
        assert len(values) == len(set(values))

    def test_known_values(self):
        assert ErrorCode.DB_CONNECT == "FN-DB01"
        assert ErrorCode.DB_VACUUM == "FN-DB02"
        assert ErrorCode.DB_MIGRATE == "FN-DB03"
        assert ErrorCode.IO_EXPORT == "FN-IO03"
        assert ErrorCode.IO_RESTORE == "FN-IO02"
        assert ErrorCode.VAL_REQUIRED == "FN-VAL01"
        assert ErrorCode.VAL_REFERENCE == "FN-VAL04"
        assert ErrorCode.CLOUD_UPLOAD == "FN-CLD01"


class TestErrorMessage:
    def test_reference_code_in_message(self):
        for code in ErrorCode:
            assert code.value in error_message(code)

    def test_detail_appended_to_message(self):
        message = error_message(ErrorCode.VAL_NUMBER, detail="ISO cannot be negative.")
        assert "ISO cannot be negative." in message

    def test_no_detail_no_extra_space(self):
        message = error_message(ErrorCode.DB_CONNECT)
        assert " \n" not in message

    def test_reference_section_format(self):
        assert error_message(ErrorCode.IO_BACKUP).endswith("\n\nReference: FN-IO01")


class TestExceptions:
    def test_str_includes_code_and_detail(self):
        err = FilmNotesError(ErrorCode.IO_EXPORT, "disk full")
        assert str(err) == "FN-IO03: disk full"
        assert err.code is ErrorCode.IO_EXPORT
        assert err.detail == "disk full"

    def test_str_without_detail(self):
        assert str(FilmNotesError(ErrorCode.DB_CONNECT)) == "FN-DB01"

    def test_message_is_user_facing_text(self):
        err = ValidationError(ErrorCode.VAL_DATE, "Date '13/13' is not a valid date.")
        assert err.message == error_message(ErrorCode.VAL_DATE, detail=err.detail)

    def test_migration_error_code(self):
        err = MigrationError("boom")
        assert err.code is ErrorCode.DB_MIGRATE
        assert isinstance(err, FilmNotesError)

    def test_validation_error_is_filmnotes_error(self):
        with pytest.raises(FilmNotesError):
            raise ValidationError(ErrorCode.VAL_REQUIRED)
