"""Local and cloud backups of the database file."""

import shutil
import sqlite3
import tempfile
from datetime import datetime
from pathlib import Path

from loguru import logger

from filmnotes.cloud.provider import CloudProvider, CloudProviderError
from filmnotes.errors import ErrorCode, FilmNotesError


def _timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def backup_name() -> str:
    return f"filmnotes_{_timestamp()}.db"


def backup_database(db_path: Path, dest_dir: Path) -> Path:
    """Copy the database file into dest_dir under a timestamped name."""
    if not db_path.exists():
        raise FilmNotesError(ErrorCode.IO_BACKUP, f"{db_path} does not exist")
    dest = dest_dir / backup_name()
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(db_path), str(dest))
    except OSError as exc:
        logger.error("Backup to {} failed: {}", dest, exc)
        raise FilmNotesError(ErrorCode.IO_BACKUP, str(exc)) from exc
    logger.info("Backed up database to {}", dest)
    return dest


def verify_database(path: Path) -> bool:
    """True when the file is an SQLite database that passes an integrity check."""
    if not path.is_file():
        return False
    try:
        conn = sqlite3.connect(str(path))
        try:
            result = conn.execute("PRAGMA integrity_check").fetchone()
        finally:
            conn.close()
    except sqlite3.DatabaseError:
        return False
    return result is not None and result[0] == "ok"


def restore_database(src: Path, db_path: Path) -> Path | None:
    """Replace db_path with src. The connection to db_path must be closed first.

    Returns the safety copy taken of the replaced database, if there was one.
    """
    if not verify_database(src):
        raise FilmNotesError(ErrorCode.IO_RESTORE, f"{src} failed the integrity check")
    safety = None
    try:
        if db_path.exists():
            safety = db_path.parent / f"filmnotes_pre_restore_{_timestamp()}.db"
            shutil.copy2(str(db_path), str(safety))
        db_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(src), str(db_path))
    except OSError as exc:
        logger.error("Restore from {} failed: {}", src, exc)
        raise FilmNotesError(ErrorCode.IO_RESTORE, str(exc)) from exc
    logger.info("Restored database from {}", src)
    return safety


def upload_backup(provider: CloudProvider, db_path: Path, remote_folder: str) -> str:
    """Upload a snapshot of the database and return its remote path."""
    remote_path = f"{remote_folder.rstrip('/')}/{backup_name()}"
    with tempfile.TemporaryDirectory() as tmpdir:
        snapshot = Path(tmpdir) / "snapshot.db"
        try:
            shutil.copy2(str(db_path), str(snapshot))
            provider.upload_file(str(snapshot), remote_path)
        except (OSError, CloudProviderError) as exc:
            logger.error("Cloud backup to {} failed: {}", remote_path, exc)
            raise FilmNotesError(ErrorCode.CLOUD_UPLOAD, str(exc)) from exc
    logger.info("Uploaded backup to {}", remote_path)
    return remote_path


def download_backup(provider: CloudProvider, remote_path: str, db_path: Path) -> Path | None:
    """Download a remote backup and restore it over db_path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        local = Path(tmpdir) / "download.db"
        try:
            provider.download_file(remote_path, str(local))
        except CloudProviderError as exc:
            logger.error("Cloud download of {} failed: {}", remote_path, exc)
            raise FilmNotesError(ErrorCode.CLOUD_DOWNLOAD, str(exc)) from exc
        return restore_database(local, db_path)
