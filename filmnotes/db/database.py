"""Database connection management, schema initialisation, and CRUD operations."""

import sqlite3
from pathlib import Path

from loguru import logger

from filmnotes import validation
from filmnotes.errors import ErrorCode, FilmNotesError, MigrationError

from . import schema
from .models import Camera, Filter, Frame, Lens, Roll, RollFilter

DB_PATH = Path.home() / ".filmnotes" / "filmnotes.db"

# Rows removed together with their parent, keyed by parent table.
_CASCADES: dict[str, tuple[tuple[str, str], ...]] = {
    "rolls": (("frames", "roll_id"),),
    "cameras": (("mountables", "camera_id"),),
    "lenses": (("mountables", "lens_id"),),
}


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    path = db_path or DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Create the schema on a fresh database or upgrade an older one."""
    version = schema.get_schema_version(conn)
    if version == 0 and not schema.has_tables(conn):
        schema.create_schema(conn)
    elif version > schema.DATABASE_VERSION:
        raise MigrationError(
            f"database version {version} is newer than supported version {schema.DATABASE_VERSION}"
        )
    elif version < schema.DATABASE_VERSION:
        schema.migrate(conn, version, schema.DATABASE_VERSION)


def _delete_with_dependents(conn: sqlite3.Connection, table: str, row_id: int) -> None:
    try:
        for child, column in _CASCADES.get(table, ()):
            cur = conn.execute(f"DELETE FROM {child} WHERE {column} = ?", (row_id,))
            if cur.rowcount:
                logger.debug("Removed {} {} rows referencing {} {}", cur.rowcount, child, table, row_id)
        conn.execute(f"DELETE FROM {table} WHERE id = ?", (row_id,))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    logger.debug("Deleted {} {}", table, row_id)


def _is_referenced(conn: sqlite3.Connection, table: str, column: str, row_id: int) -> bool:
    row = conn.execute(
        f"SELECT 1 FROM {table} WHERE {column} = ? LIMIT 1", (row_id,)
    ).fetchone()
    return row is not None


# --- Camera CRUD ---

def get_cameras(conn: sqlite3.Connection) -> list[Camera]:
    rows = conn.execute("SELECT * FROM cameras ORDER BY make").fetchall()
    return [Camera(**dict(r)) for r in rows]


def get_camera(conn: sqlite3.Connection, camera_id: int) -> Camera | None:
    row = conn.execute("SELECT * FROM cameras WHERE id = ?", (camera_id,)).fetchone()
    return Camera(**dict(row)) if row else None


def add_camera(conn: sqlite3.Connection, camera: Camera) -> Camera:
    validation.validate_camera(conn, camera)
    cur = conn.execute(
        """INSERT INTO cameras (make, model, max_shutter, min_shutter, serial_no)
           VALUES (?, ?, ?, ?, ?)""",
        (camera.make, camera.model, camera.max_shutter, camera.min_shutter,
         camera.serial_no),
    )
    conn.commit()
    return get_camera(conn, cur.lastrowid)


def update_camera(conn: sqlite3.Connection, camera: Camera) -> Camera | None:
    validation.validate_camera(conn, camera)
    conn.execute(
        """UPDATE cameras SET make=?, model=?, max_shutter=?, min_shutter=?,
           serial_no=? WHERE id=?""",
        (camera.make, camera.model, camera.max_shutter, camera.min_shutter,
         camera.serial_no, camera.id),
    )
    conn.commit()
    return get_camera(conn, camera.id)


def delete_camera(conn: sqlite3.Connection, camera_id: int) -> None:
    _delete_with_dependents(conn, "cameras", camera_id)


def is_camera_in_use(conn: sqlite3.Connection, camera_id: int) -> bool:
    return _is_referenced(conn, "rolls", "camera_id", camera_id)


# --- Lens CRUD ---

def get_lenses(conn: sqlite3.Connection) -> list[Lens]:
    rows = conn.execute("SELECT * FROM lenses ORDER BY make").fetchall()
    return [Lens(**dict(r)) for r in rows]


def get_lens(conn: sqlite3.Connection, lens_id: int) -> Lens | None:
    row = conn.execute("SELECT * FROM lenses WHERE id = ?", (lens_id,)).fetchone()
    return Lens(**dict(row)) if row else None


def add_lens(conn: sqlite3.Connection, lens: Lens) -> Lens:
    validation.validate_lens(conn, lens)
    cur = conn.execute(
        """INSERT INTO lenses (make, model, max_aperture, min_aperture,
           max_focal_length, min_focal_length, serial_no, aperture_increments)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (lens.make, lens.model, lens.max_aperture, lens.min_aperture,
         lens.max_focal_length, lens.min_focal_length, lens.serial_no,
         int(lens.aperture_increments)),
    )
    conn.commit()
    return get_lens(conn, cur.lastrowid)


def update_lens(conn: sqlite3.Connection, lens: Lens) -> Lens | None:
    validation.validate_lens(conn, lens)
    conn.execute(
        """UPDATE lenses SET make=?, model=?, max_aperture=?, min_aperture=?,
           max_focal_length=?, min_focal_length=?, serial_no=?,
           aperture_increments=? WHERE id=?""",
        (lens.make, lens.model, lens.max_aperture, lens.min_aperture,
         lens.max_focal_length, lens.min_focal_length, lens.serial_no,
         int(lens.aperture_increments), lens.id),
    )
    conn.commit()
    return get_lens(conn, lens.id)


def delete_lens(conn: sqlite3.Connection, lens_id: int) -> None:
    _delete_with_dependents(conn, "lenses", lens_id)


def is_lens_in_use(conn: sqlite3.Connection, lens_id: int) -> bool:
    return _is_referenced(conn, "frames", "lens_id", lens_id)


# --- Filter CRUD ---

def get_filters(conn: sqlite3.Connection) -> list[Filter]:
    rows = conn.execute("SELECT * FROM filters ORDER BY make").fetchall()
    return [Filter(**dict(r)) for r in rows]


def get_filter(conn: sqlite3.Connection, filter_id: int) -> Filter | None:
    row = conn.execute("SELECT * FROM filters WHERE id = ?", (filter_id,)).fetchone()
    return Filter(**dict(row)) if row else None


def add_filter(conn: sqlite3.Connection, filter_: Filter) -> Filter:
    validation.validate_filter(conn, filter_)
    cur = conn.execute(
        "INSERT INTO filters (make, model) VALUES (?, ?)",
        (filter_.make, filter_.model),
    )
    conn.commit()
    return get_filter(conn, cur.lastrowid)


def update_filter(conn: sqlite3.Connection, filter_: Filter) -> Filter | None:
    validation.validate_filter(conn, filter_)
    conn.execute(
        "UPDATE filters SET make=?, model=? WHERE id=?",
        (filter_.make, filter_.model, filter_.id),
    )
    conn.commit()
    return get_filter(conn, filter_.id)


def delete_filter(conn: sqlite3.Connection, filter_id: int) -> None:
    _delete_with_dependents(conn, "filters", filter_id)


def is_filter_in_use(conn: sqlite3.Connection, filter_id: int) -> bool:
    return _is_referenced(conn, "frames", "filter_id", filter_id)


# --- Mountables ---

def add_mountable(conn: sqlite3.Connection, camera_id: int, lens_id: int) -> None:
    """Record that the lens fits the camera. A pair already present is left alone."""
    conn.execute(
        """INSERT INTO mountables (camera_id, lens_id)
           SELECT ?, ? WHERE NOT EXISTS (
               SELECT 1 FROM mountables WHERE camera_id = ? AND lens_id = ?)""",
        (camera_id, lens_id, camera_id, lens_id),
    )
    conn.commit()


def delete_mountable(conn: sqlite3.Connection, camera_id: int, lens_id: int) -> None:
    conn.execute(
        "DELETE FROM mountables WHERE camera_id = ? AND lens_id = ?",
        (camera_id, lens_id),
    )
    conn.commit()


def get_mountable_lenses(conn: sqlite3.Connection, camera_id: int) -> list[Lens]:
    rows = conn.execute(
        """SELECT * FROM lenses WHERE id IN (
               SELECT lens_id FROM mountables WHERE camera_id = ?)
           ORDER BY make""",
        (camera_id,),
    ).fetchall()
    return [Lens(**dict(r)) for r in rows]


def get_mountable_cameras(conn: sqlite3.Connection, lens_id: int) -> list[Camera]:
    rows = conn.execute(
        """SELECT * FROM cameras WHERE id IN (
               SELECT camera_id FROM mountables WHERE lens_id = ?)
           ORDER BY make""",
        (lens_id,),
    ).fetchall()
    return [Camera(**dict(r)) for r in rows]


# --- Roll CRUD ---

def get_rolls(conn: sqlite3.Connection, roll_filter: RollFilter = RollFilter.ALL) -> list[Roll]:
    if roll_filter == RollFilter.ACTIVE:
        rows = conn.execute(
            "SELECT * FROM rolls WHERE archived = 0 ORDER BY date DESC"
        ).fetchall()
    elif roll_filter == RollFilter.ARCHIVED:
        rows = conn.execute(
            "SELECT * FROM rolls WHERE archived = 1 ORDER BY date DESC"
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM rolls ORDER BY date DESC").fetchall()
    return [Roll(**dict(r)) for r in rows]


def get_roll(conn: sqlite3.Connection, roll_id: int) -> Roll | None:
    row = conn.execute("SELECT * FROM rolls WHERE id = ?", (roll_id,)).fetchone()
    return Roll(**dict(row)) if row else None


def add_roll(conn: sqlite3.Connection, roll: Roll) -> Roll:
    validation.validate_roll(conn, roll)
    cur = conn.execute(
        """INSERT INTO rolls (name, date, note, camera_id, iso, push, format, archived,
           unloaded, developed)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (roll.name, roll.date, roll.note, roll.camera_id, roll.iso, roll.push,
         int(roll.format), int(roll.archived), roll.unloaded, roll.developed),
    )
    conn.commit()
    return get_roll(conn, cur.lastrowid)


def update_roll(conn: sqlite3.Connection, roll: Roll) -> Roll | None:
    validation.validate_roll(conn, roll)
    conn.execute(
        """UPDATE rolls SET name=?, date=?, note=?, camera_id=?, iso=?, push=?,
           format=?, archived=?, unloaded=?, developed=? WHERE id=?""",
        (roll.name, roll.date, roll.note, roll.camera_id, roll.iso, roll.push,
         int(roll.format), int(roll.archived), roll.unloaded, roll.developed,
         roll.id),
    )
    conn.commit()
    return get_roll(conn, roll.id)


def set_roll_archived(conn: sqlite3.Connection, roll_id: int, archived: bool) -> None:
    conn.execute("UPDATE rolls SET archived = ? WHERE id = ?", (int(archived), roll_id))
    conn.commit()


def delete_roll(conn: sqlite3.Connection, roll_id: int) -> None:
    _delete_with_dependents(conn, "rolls", roll_id)


def get_number_of_frames(conn: sqlite3.Connection, roll_id: int) -> int:
    row = conn.execute(
        "SELECT COUNT(*) AS cnt FROM frames WHERE roll_id = ?", (roll_id,)
    ).fetchone()
    return row["cnt"]


# --- Frame CRUD ---

_FRAME_COLUMNS = (
    "roll_id", "count", "date", "lens_id", "shutter", "aperture", "note",
    "location", "focal_length", "exposure_comp", "no_of_exposures",
    "flash_used", "flash_power", "flash_comp", "frame_size", "filter_id",
    "metering_mode",
)


def _frame_values(frame: Frame) -> tuple:
    return (
        frame.roll_id, frame.count, frame.date, frame.lens_id, frame.shutter,
        frame.aperture, frame.note, frame.location, frame.focal_length,
        frame.exposure_comp, frame.no_of_exposures, int(frame.flash_used),
        frame.flash_power, frame.flash_comp, frame.frame_size, frame.filter_id,
        frame.metering_mode,
    )


def get_frames(conn: sqlite3.Connection, roll_id: int) -> list[Frame]:
    rows = conn.execute(
        "SELECT * FROM frames WHERE roll_id = ? ORDER BY count", (roll_id,)
    ).fetchall()
    return [Frame(**dict(r)) for r in rows]


def get_frame(conn: sqlite3.Connection, frame_id: int) -> Frame | None:
    row = conn.execute("SELECT * FROM frames WHERE id = ?", (frame_id,)).fetchone()
    return Frame(**dict(row)) if row else None


def add_frame(conn: sqlite3.Connection, frame: Frame) -> Frame:
    validation.validate_frame(conn, frame)
    columns = ", ".join(_FRAME_COLUMNS)
    placeholders = ", ".join("?" for _ in _FRAME_COLUMNS)
    cur = conn.execute(
        f"INSERT INTO frames ({columns}) VALUES ({placeholders})",
        _frame_values(frame),
    )
    conn.commit()
    return get_frame(conn, cur.lastrowid)


def update_frame(conn: sqlite3.Connection, frame: Frame) -> Frame | None:
    validation.validate_frame(conn, frame)
    assignments = ", ".join(f"{c}=?" for c in _FRAME_COLUMNS)
    conn.execute(
        f"UPDATE frames SET {assignments} WHERE id=?",
        _frame_values(frame) + (frame.id,),
    )
    conn.commit()
    return get_frame(conn, frame.id)


def delete_frame(conn: sqlite3.Connection, frame_id: int) -> None:
    _delete_with_dependents(conn, "frames", frame_id)


def delete_frames_from_roll(conn: sqlite3.Connection, roll_id: int) -> None:
    conn.execute("DELETE FROM frames WHERE roll_id = ?", (roll_id,))
    conn.commit()


# --- Utility ---

def vacuum_db(conn: sqlite3.Connection) -> None:
    try:
        conn.execute("VACUUM")
    except sqlite3.Error as exc:
        logger.error("VACUUM failed: {}", exc)
        raise FilmNotesError(ErrorCode.DB_VACUUM, str(exc)) from exc
    logger.info("Database vacuumed")


def get_counts(conn: sqlite3.Connection) -> dict[str, int]:
    counts = {}
    for table in ("cameras", "lenses", "filters", "rolls", "frames"):
        row = conn.execute(f"SELECT COUNT(*) as cnt FROM {table}").fetchone()
        counts[table] = row["cnt"]
    return counts
