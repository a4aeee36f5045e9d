"""CSV and JSON export functions for rolls and frames data."""

import csv
import json
import sqlite3
from pathlib import Path

from loguru import logger

from filmnotes.db import database as db
from filmnotes.db.models import Frame, Roll, RollFilter
from filmnotes.errors import ErrorCode, FilmNotesError

ROLL_HEADER = [
    "Roll ID", "Name", "Date", "Unloaded", "Developed", "Camera", "ISO",
    "Push/Pull", "Format", "Archived", "Frames", "Note",
]

FRAME_HEADER = [
    "Frame #", "Date", "Lens", "Shutter", "Aperture", "Focal Length",
    "Exposure Comp", "No. of Exposures", "Flash", "Filter", "Location",
    "Metering Mode", "Note",
]


def _gear_name(gear) -> str:
    return gear.name if gear else ""


def _roll_to_dict(conn: sqlite3.Connection, r: Roll) -> dict:
    """Convert a roll to a JSON-serializable dict."""
    camera = db.get_camera(conn, r.camera_id) if r.camera_id else None
    return {
        "roll_id": r.id,
        "name": r.name,
        "date": r.date,
        "unloaded": r.unloaded or "",
        "developed": r.developed or "",
        "camera": _gear_name(camera),
        "iso": r.iso,
        "push": r.push or "",
        "format": r.format.name,
        "archived": r.archived,
        "frames": db.get_number_of_frames(conn, r.id),
        "note": r.note or "",
    }


def _frame_to_dict(conn: sqlite3.Connection, frame: Frame) -> dict:
    """Convert a frame to a JSON-serializable dict."""
    lens = db.get_lens(conn, frame.lens_id) if frame.lens_id else None
    filter_ = db.get_filter(conn, frame.filter_id) if frame.filter_id else None
    return {
        "count": frame.count,
        "date": frame.date,
        "lens": _gear_name(lens),
        "shutter": frame.shutter,
        "aperture": frame.aperture,
        "focal_length": frame.focal_length,
        "exposure_comp": frame.exposure_comp or "",
        "no_of_exposures": frame.no_of_exposures,
        "flash_used": frame.flash_used,
        "filter": _gear_name(filter_),
        "location": frame.location or "",
        "metering_mode": frame.metering_mode or "",
        "note": frame.note or "",
    }


def _write_csv(output_path: Path, header: list[str], rows: list[list]) -> None:
    try:
        with open(output_path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(rows)
    except OSError as exc:
        logger.error("Export to {} failed: {}", output_path, exc)
        raise FilmNotesError(ErrorCode.IO_EXPORT, str(exc)) from exc
    logger.info("Exported {} rows to {}", len(rows), output_path)


def _write_json(output_path: Path, data) -> None:
    try:
        with open(output_path, "w") as f:
            json.dump(data, f, indent=2)
    except OSError as exc:
        logger.error("Export to {} failed: {}", output_path, exc)
        raise FilmNotesError(ErrorCode.IO_EXPORT, str(exc)) from exc
    logger.info("Exported {}", output_path)


def export_rolls_csv(conn: sqlite3.Connection, output_path: Path,
                     roll_filter: RollFilter = RollFilter.ALL) -> None:
    """Write rolls to a CSV file."""
    rows = []
    for r in db.get_rolls(conn, roll_filter):
        d = _roll_to_dict(conn, r)
        rows.append([
            d["roll_id"], d["name"], d["date"], d["unloaded"], d["developed"],
            d["camera"], d["iso"] or "", d["push"], d["format"],
            "yes" if d["archived"] else "no", d["frames"], d["note"],
        ])
    _write_csv(output_path, ROLL_HEADER, rows)


def export_frames_csv(conn: sqlite3.Connection, roll_id: int, output_path: Path) -> None:
    """Write all frames of one roll to a CSV file."""
    rows = []
    for frame in db.get_frames(conn, roll_id):
        d = _frame_to_dict(conn, frame)
        focal = "" if d["focal_length"] is None else d["focal_length"]
        rows.append([
            d["count"], d["date"], d["lens"], d["shutter"], d["aperture"],
            focal, d["exposure_comp"], d["no_of_exposures"],
            "yes" if d["flash_used"] else "no", d["filter"], d["location"],
            d["metering_mode"], d["note"],
        ])
    _write_csv(output_path, FRAME_HEADER, rows)


def export_rolls_json(conn: sqlite3.Connection, output_path: Path,
                      roll_filter: RollFilter = RollFilter.ALL) -> None:
    """Write rolls to a JSON file."""
    rolls = db.get_rolls(conn, roll_filter)
    _write_json(output_path, [_roll_to_dict(conn, r) for r in rolls])


def export_frames_json(conn: sqlite3.Connection, roll_id: int, output_path: Path) -> None:
    """Write one roll and its frames to a JSON file."""
    roll = db.get_roll(conn, roll_id)
    data = _roll_to_dict(conn, roll) if roll else {"roll_id": roll_id}
    data["frame_list"] = [_frame_to_dict(conn, f) for f in db.get_frames(conn, roll_id)]
    _write_json(output_path, data)
