"""Logging initialization using loguru."""

from __future__ import annotations

from pathlib import Path

from loguru import logger


def init_logging(log_dir: str | Path, level: str = "INFO") -> Path:
    """Replace the default stderr sink with a rotating file sink under log_dir."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "filmnotes_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        backtrace=False,
        diagnose=False,
        level=level,
    )
    return log_path


def find_latest_log_file(log_dir: str | Path) -> Path | None:
    """Return the most recently modified log file, if any."""
    log_path = Path(log_dir)
    if not log_path.exists():
        return None
    log_files = list(log_path.glob("filmnotes_*.log"))
    if not log_files:
        return None
    return max(log_files, key=lambda p: p.stat().st_mtime)
