import logging

import pytest
from typer.testing import CliRunner

from dumpctl import cli
from dumpctl.log import LOGGER_NAME
from dumpctl.worker import Runtime

from conftest import FakeRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()


def _config(tmp_path, output_dir, log_file):
    path = tmp_path / "dumpctl.yaml"
    path.write_text(
        "database:\n"
        "  name: appdb\n"
        "  user: backup\n"
        "  password: s3cret\n"
        "backup:\n"
        f"  output_dir: {output_dir}\n"
        "  frequency: 24h\n"
        "  retention_days: 3\n"
        "logging:\n"
        f"  file_path: {log_file}\n",
        encoding="utf-8",
    )
    return path


def test_missing_argument_prints_usage():
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 2
    assert "Usage" in result.output


def test_missing_config_exits_without_side_effects(tmp_path):
    result = runner.invoke(cli.app, [str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1
    assert "Failed to load config" in result.output
    assert list(tmp_path.iterdir()) == []


def test_once_runs_a_single_cycle(tmp_path, monkeypatch):
    fake = FakeRunner()
    monkeypatch.setattr(cli, "Runtime", lambda logger: Runtime(logger=logger, runner=fake))
    out = tmp_path / "out" / "nested"
    log_file = tmp_path / "logs" / "dumpctl.log"

    result = runner.invoke(cli.app, [str(_config(tmp_path, out, log_file)), "--once"])

    assert result.exit_code == 0, result.output
    assert len(fake.calls) == 1
    dumps = list(out.glob("appdb_*.dump"))
    assert len(dumps) == 1
    log = log_file.read_text(encoding="utf-8")
    assert "[BACKUP]" in log
    assert "Backup completed successfully" in log
    assert "s3cret" not in log


def test_unusable_output_dir_is_fatal(tmp_path, monkeypatch):
    fake = FakeRunner()
    monkeypatch.setattr(cli, "Runtime", lambda logger: Runtime(logger=logger, runner=fake))
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")
    log_file = tmp_path / "dumpctl.log"

    result = runner.invoke(cli.app, [str(_config(tmp_path, blocker / "out", log_file)), "--once"])

    assert result.exit_code == 1
    assert fake.calls == []
    log = log_file.read_text(encoding="utf-8")
    assert log.index("Starting backup tool...") < log.index("failed to create output directory")


def test_ctrl_c_exits_quietly(tmp_path, monkeypatch):
    def interrupted(job, rt, max_cycles=None):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "run_forever", interrupted)
    log_file = tmp_path / "dumpctl.log"

    result = runner.invoke(cli.app, [str(_config(tmp_path, tmp_path / "out", log_file))])

    assert result.exit_code == 0
    assert "Stopping backup tool" in log_file.read_text(encoding="utf-8")


def test_config_error_details_survive_console_markup(tmp_path):
    path = tmp_path / "dumpctl.yaml"
    path.write_text("database:\n  name: appdb\nbackup:\n  output_dir: out\n  frequency: 1h\n", encoding="utf-8")

    result = runner.invoke(cli.app, [str(path)])

    assert result.exit_code == 1
    console_part = result.output[result.output.index("Failed to load config:"):]
    assert "[type=missing" in console_part
