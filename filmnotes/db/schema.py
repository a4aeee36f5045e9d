"""Table definitions and additive schema migrations.

The schema revision is kept in SQLite's ``user_version`` header field.
Revision 13 is the oldest layout that can still be upgraded:

  13  cameras, lenses, rolls and frames with their original columns, mountables
  14  gear details, frame exposure details, the filters table
  15  lens aperture increments; roll archive flag and unload/develop dates
"""

import sqlite3

from loguru import logger

from filmnotes.errors import MigrationError

DATABASE_VERSION = 15
OLDEST_SUPPORTED_VERSION = 13

CREATE_TABLES = """
    CREATE TABLE IF NOT EXISTS cameras (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        make TEXT NOT NULL,
        model TEXT NOT NULL,
        max_shutter TEXT,
        min_shutter TEXT,
        serial_no TEXT
    );

    CREATE TABLE IF NOT EXISTS lenses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        make TEXT NOT NULL,
        model TEXT NOT NULL,
        max_aperture TEXT,
        min_aperture TEXT,
        max_focal_length INTEGER,
        min_focal_length INTEGER,
        serial_no TEXT,
        aperture_increments INTEGER NOT NULL DEFAULT 0
    );

    CREATE TABLE IF NOT EXISTS filters (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        make TEXT NOT NULL,
        model TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS rolls (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        date TEXT NOT NULL,
        note TEXT,
        camera_id INTEGER NOT NULL,
        iso INTEGER,
        push TEXT,
        format INTEGER,
        archived INTEGER NOT NULL DEFAULT 0,
        unloaded TEXT,
        developed TEXT
    );

    CREATE TABLE IF NOT EXISTS frames (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        roll_id INTEGER NOT NULL,
        count INTEGER NOT NULL,
        date TEXT NOT NULL,
        lens_id INTEGER NOT NULL,
        shutter TEXT NOT NULL,
        aperture TEXT NOT NULL,
        note TEXT,
        location TEXT,
        focal_length INTEGER,
        exposure_comp TEXT,
        no_of_exposures INTEGER,
        flash_used INTEGER,
        flash_power TEXT,
        flash_comp TEXT,
        frame_size TEXT,
        filter_id INTEGER,
        metering_mode TEXT
    );

    CREATE TABLE IF NOT EXISTS mountables (
        camera_id INTEGER NOT NULL,
        lens_id INTEGER NOT NULL
    );
"""

# Layout as shipped in revision 13. Only used to build databases that need upgrading.
LEGACY_SCHEMA_V13 = """
    CREATE TABLE frames (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        roll_id INTEGER NOT NULL,
        count INTEGER NOT NULL,
        date TEXT NOT NULL,
        lens_id INTEGER NOT NULL,
        shutter TEXT NOT NULL,
        aperture TEXT NOT NULL,
        note TEXT,
        location TEXT
    );
    CREATE TABLE lenses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        make TEXT NOT NULL,
        model TEXT NOT NULL
    );
    CREATE TABLE rolls (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        date TEXT NOT NULL,
        note TEXT,
        camera_id INTEGER NOT NULL
    );
    CREATE TABLE cameras (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        make TEXT NOT NULL,
        model TEXT NOT NULL
    );
    CREATE TABLE mountables (
        camera_id INTEGER NOT NULL,
        lens_id INTEGER NOT NULL
    );
    PRAGMA user_version = 13;
"""

# Revision 13 and earlier stored every quote mark of a shutter value as the letter 'q'.
REPLACE_QUOTE_CHARS = (
    "UPDATE frames SET shutter = REPLACE(shutter, 'q', '\"') WHERE shutter LIKE '%q'"
)

MIGRATIONS: dict[int, list[str]] = {
    14: [
        "ALTER TABLE frames ADD COLUMN focal_length INTEGER",
        "ALTER TABLE frames ADD COLUMN exposure_comp TEXT",
        "ALTER TABLE frames ADD COLUMN no_of_exposures INTEGER",
        "ALTER TABLE frames ADD COLUMN flash_used INTEGER",
        "ALTER TABLE frames ADD COLUMN flash_power TEXT",
        "ALTER TABLE frames ADD COLUMN flash_comp TEXT",
        "ALTER TABLE frames ADD COLUMN frame_size TEXT",
        "ALTER TABLE frames ADD COLUMN filter_id INTEGER",
        "ALTER TABLE frames ADD COLUMN metering_mode TEXT",
        "ALTER TABLE lenses ADD COLUMN max_aperture TEXT",
        "ALTER TABLE lenses ADD COLUMN min_aperture TEXT",
        "ALTER TABLE lenses ADD COLUMN max_focal_length INTEGER",
        "ALTER TABLE lenses ADD COLUMN min_focal_length INTEGER",
        "ALTER TABLE lenses ADD COLUMN serial_no TEXT",
        "ALTER TABLE cameras ADD COLUMN max_shutter TEXT",
        "ALTER TABLE cameras ADD COLUMN min_shutter TEXT",
        "ALTER TABLE cameras ADD COLUMN serial_no TEXT",
        "ALTER TABLE rolls ADD COLUMN iso INTEGER",
        "ALTER TABLE rolls ADD COLUMN push TEXT",
        "ALTER TABLE rolls ADD COLUMN format INTEGER",
        REPLACE_QUOTE_CHARS,
        """CREATE TABLE IF NOT EXISTS filters (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            make TEXT NOT NULL,
            model TEXT NOT NULL
        )""",
    ],
    15: [
        "ALTER TABLE lenses ADD COLUMN aperture_increments INTEGER NOT NULL DEFAULT 0",
        "ALTER TABLE rolls ADD COLUMN archived INTEGER NOT NULL DEFAULT 0",
        "ALTER TABLE rolls ADD COLUMN unloaded TEXT",
        "ALTER TABLE rolls ADD COLUMN developed TEXT",
    ],
}


def get_schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def has_tables(conn: sqlite3.Connection) -> bool:
    row = conn.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
    ).fetchone()
    return row[0] > 0


def create_schema(conn: sqlite3.Connection) -> None:
    """Create every table with the current column set."""
    conn.executescript(CREATE_TABLES + f"PRAGMA user_version = {DATABASE_VERSION};")
    conn.commit()
    logger.info("Created database schema version {}", DATABASE_VERSION)


def migrate(conn: sqlite3.Connection, old_version: int, new_version: int = DATABASE_VERSION) -> None:
    """Upgrade the schema from old_version to new_version in one transaction.

    Any failure rolls the whole upgrade back and raises MigrationError.
    """
    if old_version < OLDEST_SUPPORTED_VERSION:
        raise MigrationError(f"version {old_version} is older than {OLDEST_SUPPORTED_VERSION}")
    if new_version > DATABASE_VERSION:
        raise MigrationError(f"version {new_version} is newer than {DATABASE_VERSION}")
    if old_version >= new_version:
        return

    logger.info("Migrating database schema from version {} to {}", old_version, new_version)
    try:
        if not conn.in_transaction:
            conn.execute("BEGIN")
        for version in range(old_version + 1, new_version + 1):
            for statement in MIGRATIONS[version]:
                conn.execute(statement)
            logger.debug("Applied schema revision {}", version)
        conn.execute(f"PRAGMA user_version = {new_version}")
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Schema migration to version {} failed: {}", new_version, exc)
        raise MigrationError(str(exc)) from exc
