from datetime import datetime
from pathlib import Path

from .models import BackupJob

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

EXTENSIONS = {
    "plain": ".sql",
    "tar": ".tar",
    "directory": "",  # pg_dump writes a directory, not a file
    "custom": ".dump",
}


def normalize_format(fmt: str) -> str:
    """Map anything pg_dump would not recognise to the custom format."""
    return fmt if fmt in EXTENSIONS else "custom"


def extension_for(fmt: str) -> str:
    return EXTENSIONS[normalize_format(fmt)]


def artifact_name(database: str, now: datetime, fmt: str) -> str:
    """
    <database>_<YYYY-MM-DD_HH-MM-SS><ext>; names of one database sort chronologically.
    """
    return f"{database}_{now.strftime(TIMESTAMP_FORMAT)}{extension_for(fmt)}"


def artifact_path(job: BackupJob, now: datetime) -> Path:
    return Path(job.backup.output_dir) / artifact_name(job.database.name, now, job.backup.format)
