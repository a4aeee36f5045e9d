"""Process-wide application handle owning the database connection."""

import sqlite3

from loguru import logger

from filmnotes.config import Settings
from filmnotes.db import database as db
from filmnotes.db.models import Roll
from filmnotes.errors import ErrorCode, FilmNotesError, MigrationError
from filmnotes.logging import init_logging
from filmnotes.sorting import sort_rolls


class FilmNotes:
    """Opens the database once per process and hands the connection to callers.

    Startup failures are fatal: open() raises instead of leaving a
    half-initialised store behind.
    """

    def __init__(self, settings: Settings | None = None, *, configure_logging: bool = True) -> None:
        self.settings = settings or Settings()
        self._configure_logging = configure_logging
        self.db_conn: sqlite3.Connection | None = None

    def open(self) -> sqlite3.Connection:
        if self.db_conn is not None:
            return self.db_conn
        if self._configure_logging:
            init_logging(self.settings.log_dir, self.settings.log_level)
        path = self.settings.db_path
        try:
            conn = db.get_connection(path)
        except (sqlite3.Error, OSError) as exc:
            logger.exception("Could not open database at {}", path)
            raise FilmNotesError(ErrorCode.DB_CONNECT, str(exc)) from exc
        try:
            db.init_db(conn)
        except MigrationError:
            conn.close()
            raise
        except sqlite3.Error as exc:
            conn.close()
            logger.exception("Could not initialise database at {}", path)
            raise FilmNotesError(ErrorCode.DB_CONNECT, str(exc)) from exc
        logger.info("Opened database {}", path)
        self.db_conn = conn
        return conn

    def close(self) -> None:
        if self.db_conn is not None:
            self.db_conn.close()
            self.db_conn = None

    def __enter__(self) -> "FilmNotes":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self.db_conn is None:
            raise FilmNotesError(ErrorCode.DB_CONNECT, "database is not open")
        return self.db_conn

    def visible_rolls(self) -> list[Roll]:
        """Rolls as the roll list shows them: configured filter, then sort mode."""
        rolls = db.get_rolls(self.conn, self.settings.roll_filter)
        cameras = {c.id: c for c in db.get_cameras(self.conn)}
        return sort_rolls(rolls, self.settings.roll_sort, cameras)
