import logging
from datetime import datetime
from typing import List

import pytest

from dumpctl.models import BackupJob


@pytest.fixture
def make_job(tmp_path):
    def _make(database=None, **backup):
        data = {
            "database": {"name": "appdb", "user": "backup", "password": "s3cret"},
            "backup": {"output_dir": str(tmp_path / "backups"), "frequency": "1h"},
        }
        data["database"].update(database or {})
        data["backup"].update(backup)
        return BackupJob.model_validate(data)
    return _make


@pytest.fixture
def logger():
    log = logging.getLogger("tests.dumpctl")
    log.setLevel(logging.DEBUG)
    return log


class FakeRunner:
    """Records calls; optionally writes the artifact like pg_dump would."""

    def __init__(self, rc: int = 0, output: str = "pg_dump: dumping contents\n", write: bool = True):
        self.rc = rc
        self.output = output
        self.write = write
        self.calls: List[tuple] = []

    def __call__(self, argv, env):
        self.calls.append((list(argv), dict(env)))
        if self.write and self.rc == 0:
            target = argv[argv.index("--file") + 1]
            with open(target, "w", encoding="utf-8") as f:
                f.write("-- dump --\n")
        return self.rc, self.output


class FakeClock:
    """Wall clock and monotonic clock that only move when told to."""

    def __init__(self, now: datetime):
        self.now = now
        self.mono = 1000.0
        self.sleeps: List[float] = []

    def clock(self) -> datetime:
        return self.now

    def monotonic(self) -> float:
        return self.mono

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.mono += seconds


@pytest.fixture
def fake_runner():
    return FakeRunner()
