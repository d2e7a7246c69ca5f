"""Append-only file storage for violation reports. Never raises on I/O errors."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import structlog

logger = structlog.get_logger()


def report_filename(directory: str | Path, fmt: str, now: datetime | None = None) -> Path:
    """Return the report file path for ``now`` using a strftime pattern."""
    return Path(directory) / (now or datetime.now()).strftime(fmt)


def append_report(path: str | Path, serialized: str) -> bool:
    """Append one serialized report plus a newline to ``path``.

    Returns False when the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(serialized + "\n")
    except OSError as exc:
        logger.warning("csp_report_store_failed", path=str(path), error=str(exc))
        return False
    logger.info("csp_report_stored", path=str(path))
    return True
