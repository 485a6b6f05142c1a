import os
import shlex
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .models import BackupJob, DumpResult
from .naming import normalize_format

PASSWORD_ENV = "PGPASSWORD"

# (argv, env) -> (returncode, combined stdout+stderr)
Runner = Callable[[List[str], Dict[str, str]], Tuple[int, str]]


def run_command(argv: List[str], env: Dict[str, str]) -> Tuple[int, str]:
    """
    Executes argv synchronously with stderr folded into stdout.
    Returns (returncode, combined_output). No timeout: a hung child blocks the caller.
    """
    try:
        r = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            env=env,
        )
        return r.returncode, r.stdout or ""
    except FileNotFoundError as e:
        return 127, f"exception: {e}"
    except (OSError, ValueError) as e:
        # ValueError: NUL byte in argv or env
        return 126, f"exception: {e}"


def build_dump_command(job: BackupJob, output_path: Path) -> List[str]:
    db = job.database
    return [
        job.backup.dump_command,
        "-h", db.host,
        "-p", str(db.port),
        "-U", db.user,
        "-d", db.name,
        "--verbose",
        "--no-password",
        f"--format={normalize_format(job.backup.format)}",
        # same flag for a directory target (format=directory) and a file target
        "--file", str(output_path),
    ]


def dump_env(job: BackupJob, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Copy of the current environment plus PGPASSWORD; the password never goes on argv."""
    env = dict(os.environ if base is None else base)
    if job.password is not None:
        env[PASSWORD_ENV] = job.password
    return env


def format_command(argv: List[str]) -> str:
    return shlex.join(argv)


def invoke_dump(job: BackupJob, output_path: Path, runner: Runner = run_command) -> DumpResult:
    argv = build_dump_command(job, output_path)
    rc, output = runner(argv, dump_env(job))
    return DumpResult(path=output_path, command=argv, returncode=rc, output=output)
