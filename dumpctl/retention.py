import logging
import os
from datetime import datetime, timedelta
from pathlib import Path

from .errors import SweepError
from .models import SweepResult


def retention_cutoff(now: datetime, retention_days: int) -> datetime:
    """
    now minus retention_days calendar days.

    datetime arithmetic keeps the wall-clock time for naive local and
    zone-aware values alike, so a DST change inside the window does not
    move the cutoff by an hour.
    """
    return now - timedelta(days=retention_days)


def sweep_expired(output_dir: Path, retention_days: int, now: datetime,
                  logger: logging.Logger) -> SweepResult:
    """
    Delete non-directory entries of output_dir modified strictly before the cutoff.

    Not recursive: directories, including directory-format artifacts, are left
    alone. A failed removal is logged and the sweep moves on to the next entry.
    """
    cutoff = retention_cutoff(now, retention_days)
    cutoff_ts = cutoff.timestamp()
    result = SweepResult(cutoff=cutoff)

    try:
        with os.scandir(output_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise SweepError(f"failed to read backup directory {output_dir}: {e}") from e

    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                result.skipped_dirs += 1
                continue
            mtime = entry.stat(follow_symlinks=False).st_mtime
        except OSError:
            continue

        if mtime >= cutoff_ts:
            continue

        path = Path(entry.path)
        try:
            path.unlink()
        except OSError as e:
            logger.error("Failed to remove old backup %s: %s", path, e)
            result.failed.append(path)
        else:
            logger.info("Removed old backup: %s", path)
            result.removed.append(path)

    return result
