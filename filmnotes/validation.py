"""Record validation applied before anything is written to the database."""

import sqlite3
from datetime import datetime

from filmnotes.db.models import DATE_FORMAT, Camera, Filter, Frame, Lens, Roll
from filmnotes.errors import ErrorCode, ValidationError


def _require(value: str | None, field: str) -> None:
    if value is None or not str(value).strip():
        raise ValidationError(ErrorCode.VAL_REQUIRED, f"{field} is required.")


def _require_date(value: str | None, field: str) -> None:
    _require(value, field)
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ValidationError(ErrorCode.VAL_DATE, f"{field} '{value}' is not a valid date.") from None


def _require_reference(conn: sqlite3.Connection, table: str, row_id: int | None, field: str) -> None:
    if row_id is None:
        raise ValidationError(ErrorCode.VAL_REQUIRED, f"{field} is required.")
    row = conn.execute(f"SELECT 1 FROM {table} WHERE id = ?", (row_id,)).fetchone()
    if row is None:
        raise ValidationError(ErrorCode.VAL_REFERENCE, f"{field} {row_id} does not exist.")


def _optional_date(value: str | None, field: str) -> None:
    if value:
        _require_date(value, field)


def _f_number(value: str, field: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ValidationError(ErrorCode.VAL_NUMBER, f"{field} '{value}' is not an f-number.") from None


def _require_pair(low, high, field: str) -> None:
    """Ranges are either fully set or fully empty."""
    if (low in (None, "")) != (high in (None, "")):
        raise ValidationError(ErrorCode.VAL_RANGE, f"{field} needs both a minimum and a maximum.")


def _require_non_negative(value: int | None, field: str) -> None:
    if value is not None and value < 0:
        raise ValidationError(ErrorCode.VAL_NUMBER, f"{field} cannot be negative.")


def validate_camera(conn: sqlite3.Connection, camera: Camera) -> None:
    _require(camera.make, "Make")
    _require(camera.model, "Model")
    _require_pair(camera.min_shutter, camera.max_shutter, "Shutter speed range")


def validate_lens(conn: sqlite3.Connection, lens: Lens) -> None:
    _require(lens.make, "Make")
    _require(lens.model, "Model")
    _require_pair(lens.min_aperture, lens.max_aperture, "Aperture range")
    _require_pair(lens.min_focal_length, lens.max_focal_length, "Focal length range")
    # The minimum aperture is the smallest opening, so its f-number is the larger one.
    if lens.min_aperture and lens.max_aperture:
        if _f_number(lens.min_aperture, "Minimum aperture") < _f_number(lens.max_aperture, "Maximum aperture"):
            raise ValidationError(ErrorCode.VAL_RANGE, "Minimum aperture must have the larger f-number.")
    _require_non_negative(lens.min_focal_length, "Focal length")
    if lens.min_focal_length is not None and lens.max_focal_length is not None:
        if lens.min_focal_length > lens.max_focal_length:
            raise ValidationError(ErrorCode.VAL_RANGE, "Minimum focal length exceeds the maximum.")


def validate_filter(conn: sqlite3.Connection, filter_: Filter) -> None:
    _require(filter_.make, "Make")
    _require(filter_.model, "Model")


def validate_roll(conn: sqlite3.Connection, roll: Roll) -> None:
    _require(roll.name, "Name")
    _require_date(roll.date, "Date")
    _require_non_negative(roll.iso, "ISO")
    _optional_date(roll.unloaded, "Unloaded date")
    _optional_date(roll.developed, "Developed date")
    _require_reference(conn, "cameras", roll.camera_id, "Camera")


def validate_frame(conn: sqlite3.Connection, frame: Frame) -> None:
    if frame.count is None or frame.count < 1:
        raise ValidationError(ErrorCode.VAL_NUMBER, "Frame count must be 1 or more.")
    _require_date(frame.date, "Date")
    if frame.shutter is None or frame.aperture is None:
        raise ValidationError(ErrorCode.VAL_REQUIRED, "Shutter speed and aperture are required.")
    _require_non_negative(frame.focal_length, "Focal length")
    if frame.no_of_exposures is not None and frame.no_of_exposures < 1:
        raise ValidationError(ErrorCode.VAL_NUMBER, "Number of exposures must be 1 or more.")
    _require_reference(conn, "rolls", frame.roll_id, "Roll")
    _require_reference(conn, "lenses", frame.lens_id, "Lens")
    if frame.filter_id is not None:
        _require_reference(conn, "filters", frame.filter_id, "Filter")
