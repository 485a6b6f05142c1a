import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULTS = {
    "host": "localhost",
    "port": 5432,
    "format": "custom",
    "retention_days": 7,
    "dump_command": "pg_dump",
    "log_level": "INFO",
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value) -> timedelta:
    """
    Parse '24h', '1h30m', '90s', '500ms' (or a bare number of seconds).
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError("duration must be a string like '24h' or a number of seconds")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    text = str(value).strip().replace(" ", "")
    if not text:
        raise ValueError("duration is empty")
    if text.isdigit():
        return timedelta(seconds=int(text))
    total, pos = 0.0, 0
    for m in _DURATION_PART.finditer(text):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()
    if pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return timedelta(seconds=total)


class DatabaseSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = Field(default=DEFAULTS["host"])
    port: int = Field(default=DEFAULTS["port"], ge=1, le=65535)
    name: str = Field(min_length=1)
    user: str = Field(min_length=1)
    password: Optional[SecretStr] = None

    @field_validator("host", mode="before")
    @classmethod
    def _blank_host(cls, v):
        return v or DEFAULTS["host"]

    @field_validator("port", mode="before")
    @classmethod
    def _zero_port(cls, v):
        return v or DEFAULTS["port"]

    @field_validator("password", mode="before")
    @classmethod
    def _stringify_password(cls, v):
        # YAML turns an all-digit password into an int
        if v is None or v == "":
            return None
        return v if isinstance(v, SecretStr) else str(v)


class BackupSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_dir: Path
    frequency: timedelta
    retention_days: int = Field(default=DEFAULTS["retention_days"], ge=0)
    format: str = Field(default=DEFAULTS["format"])  # plain | tar | directory | custom
    dump_command: str = Field(default=DEFAULTS["dump_command"], min_length=1)

    @field_validator("frequency", mode="before")
    @classmethod
    def _parse_frequency(cls, v):
        return parse_duration(v)

    @field_validator("frequency")
    @classmethod
    def _positive_frequency(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("frequency must be positive")
        return v

    # 0 and missing both mean "use the default window"
    @field_validator("retention_days", mode="before")
    @classmethod
    def _zero_retention(cls, v):
        return v or DEFAULTS["retention_days"]

    @field_validator("format", mode="before")
    @classmethod
    def _blank_format(cls, v):
        return v or DEFAULTS["format"]


class LoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = Field(default=DEFAULTS["log_level"])
    file_path: Optional[Path] = None

    @field_validator("level", mode="before")
    @classmethod
    def _blank_level(cls, v):
        return v or DEFAULTS["log_level"]


class BackupJob(BaseModel):
    """Everything one process run needs; built once, never mutated."""

    model_config = ConfigDict(frozen=True)

    database: DatabaseSettings
    backup: BackupSettings
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def password(self) -> Optional[str]:
        pw = self.database.password
        return pw.get_secret_value() if pw else None


class DumpResult(BaseModel):
    path: Path
    command: List[str]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class SweepResult(BaseModel):
    cutoff: datetime
    removed: List[Path] = Field(default_factory=list)
    failed: List[Path] = Field(default_factory=list)
    skipped_dirs: int = 0
