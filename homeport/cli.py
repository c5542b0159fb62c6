#!/usr/bin/env python3
"""homeport CLI - manage the home-server app catalog mirror."""
import dataclasses
import sys
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console

from homeport.cli_repo_commands import register_repo_commands
from homeport.core.config import get_config, set_config
from homeport.core.logger import configure_logging, default_log_file, get_logger

app = typer.Typer(
    name="repo",
    help="""Manage the app catalog repository

Commands:
  repo id                      # Identifier of the active catalog
  repo path                    # Local mirror path
  repo set <url>               # Persist a new catalog URL
  repo update                  # Clone or pull the catalog
  repo branch <name>           # Check out a catalog branch
  repo checkout <owner/name#branch>
  repo default-repo            # Built-in catalog URL
""",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)

register_repo_commands(app, console, err_console)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(None, "--root", help="Platform root directory (default: $HOMEPORT_ROOT)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log: bool = typer.Option(False, "--log", help="Also write logs to {root}/logs/homeport.log"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file (implies --log)"),
) -> None:
    if root is not None:
        set_config(dataclasses.replace(get_config(), root=root))
    if log and log_file is None:
        log_file = default_log_file(get_config().root)
    configure_logging(verbose=verbose, log_file=log_file)
    logger.debug(f"Using platform root {get_config().root}")

    if ctx.invoked_subcommand is None:
        err_console.print(ctx.get_usage(), markup=False, highlight=False)
        err_console.print("Try 'repo --help' for help.", markup=False, highlight=False)
        raise typer.Exit(1)


def main() -> None:
    """Console entry point; usage errors exit with status 1."""
    try:
        exit_code = app(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        exit_code = 1
    except click.exceptions.Abort:
        err_console.print("Aborted!")
        exit_code = 1
    sys.exit(exit_code if isinstance(exit_code, int) else 0)


if __name__ == "__main__":
    main()
