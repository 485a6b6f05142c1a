# dumpctl/worker.py
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Tuple

from .errors import StartupError, SweepError
from .executor import Runner, build_dump_command, format_command, invoke_dump, run_command
from .log import get_logger
from .models import BackupJob, DumpResult, SweepResult
from .naming import EXTENSIONS, artifact_path
from .retention import sweep_expired
from .utils import localnow


@dataclass
class Runtime:
    """
    Collaborators the scheduler talks to. Defaults are the real ones; tests
    swap in a fake clock, runner and sleep.
    """

    logger: logging.Logger = field(default_factory=get_logger)
    clock: Callable[[], datetime] = localnow
    runner: Runner = run_command
    monotonic: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep


def prepare(job: BackupJob, rt: Runtime) -> Path:
    """Starting state: make sure the output directory exists."""
    out = Path(job.backup.output_dir)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StartupError(f"failed to create output directory {out}: {e}") from e
    if job.backup.format not in EXTENSIONS:
        rt.logger.warning("Unknown backup format %r, using custom", job.backup.format)
    return out


def run_backup(job: BackupJob, rt: Runtime) -> DumpResult:
    rt.logger.info("Starting backup...")
    target = artifact_path(job, rt.clock())
    rt.logger.info("Running: %s", format_command(build_dump_command(job, target)))
    try:
        result = invoke_dump(job, target, runner=rt.runner)
    except Exception as e:
        # a broken runner counts as a failed run; the loop keeps going
        result = DumpResult(
            path=target, command=build_dump_command(job, target),
            returncode=1, output=f"exception: {e}",
        )
    if result.ok:
        rt.logger.info("Backup completed successfully: %s", result.path)
    else:
        rt.logger.error(
            "Backup failed: %s exited with status %d, output: %s",
            job.backup.dump_command, result.returncode, result.output.strip(),
        )
    return result


def run_sweep(job: BackupJob, rt: Runtime) -> Optional[SweepResult]:
    try:
        result = sweep_expired(job.backup.output_dir, job.backup.retention_days, rt.clock(), rt.logger)
    except SweepError as e:
        rt.logger.warning("Warning: Failed to cleanup old backups: %s", e)
        return None
    if result.failed:
        rt.logger.warning("Cleanup left %d expired backup(s) in place", len(result.failed))
    rt.logger.debug(
        "Cleanup done: cutoff=%s removed=%d", result.cutoff.isoformat(), len(result.removed)
    )
    return result


def run_cycle(job: BackupJob, rt: Runtime) -> Tuple[DumpResult, Optional[SweepResult]]:
    """One backup-and-sweep cycle. The sweep runs whatever the dump outcome."""
    dump = run_backup(job, rt)
    sweep = run_sweep(job, rt)
    return dump, sweep


def run_forever(job: BackupJob, rt: Optional[Runtime] = None, max_cycles: Optional[int] = None) -> int:
    """
    Scheduler loop:
      - prepares the output directory (StartupError is fatal)
      - runs one cycle immediately, then one per interval
      - strictly sequential: cycle N+1 starts only after cycle N returns
      - a cycle that overruns keeps one pending tick, so the next cycle starts
        as soon as it returns; further missed ticks are dropped
    Returns the number of cycles run (only reachable with max_cycles).
    """
    rt = rt or Runtime()
    rt.logger.info("Starting backup tool...")
    prepare(job, rt)

    interval = job.backup.frequency.total_seconds()
    next_at = rt.monotonic()
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        delay = next_at - rt.monotonic()
        if delay > 0:
            rt.sleep(delay)

        run_cycle(job, rt)
        cycles += 1

        next_at += interval
        now = rt.monotonic()
        if next_at < now:
            dropped = int((now - next_at) // interval)
            next_at = now
            rt.logger.warning("Backup cycle overran the interval, skipped %d tick(s)", dropped)
    return cycles
