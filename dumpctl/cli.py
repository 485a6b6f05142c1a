from pathlib import Path

import typer
from rich import print
from rich.markup import escape

from .config import load_config
from .errors import ConfigError, StartupError
from .log import get_logger, setup_logging
from .worker import Runtime, run_forever

app = typer.Typer(
    help="dumpctl - periodic pg_dump backups with retention.",
    add_completion=False,
)


@app.command()
def main(
    config: Path = typer.Argument(..., help="Path to the YAML configuration file"),
    once: bool = typer.Option(False, "--once", help="Run a single backup-and-cleanup cycle and exit"),
):
    """Back up the configured database now, then on every interval."""
    try:
        job = load_config(config)
    except ConfigError as e:
        # no configured sink yet, so log to stdout
        setup_logging().error("Failed to create backup tool: %s", e)
        print(f"[red]Failed to load config:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    logger = setup_logging(job.logging)
    try:
        run_forever(job, Runtime(logger=logger), max_cycles=1 if once else None)
    except StartupError as e:
        logger.error("%s", e)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        # quiet exit on Ctrl+C
        get_logger().info("Stopping backup tool")
