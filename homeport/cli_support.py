"""Shared utilities for homeport CLI modules."""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from homeport.core.config import HomeportConfig, get_config, is_mock
from homeport.core.state_store import JsonConfigStore
from homeport.core.synchronizer import RepoSynchronizer
from homeport.services.git_manager import GitManager


def get_synchronizer(config: Optional[HomeportConfig] = None) -> RepoSynchronizer:
    """Return a RepoSynchronizer wired to the on-disk user record."""
    config = config or get_config()
    return RepoSynchronizer(
        store=JsonConfigStore(config.config_file),
        git=GitManager(mock=is_mock()),
        config=config,
    )


def require_argument(value: Optional[str], name: str, console: Console) -> str:
    """Exit with status 1 unless ``value`` is a non-empty string."""
    if value is None or not value.strip():
        print_error(console, f"Missing required argument: {name}")
        raise typer.Exit(1)
    return value


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output (the error console)
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False, soft_wrap=True)
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_value(console: Console, value: object) -> None:
    """Print a bare value for scripts: no markup, highlighting or wrapping."""
    console.print(str(value), markup=False, highlight=False, soft_wrap=True)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}", highlight=False)


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting.

    Args:
        console: Rich console for output
        message: Error message
        prefix: Prefix symbol (default: ✗)
    """
    console.print(f"[red]{prefix}[/red] {message}", highlight=False, soft_wrap=True)


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    """Print info message with consistent formatting."""
    console.print(f"[cyan]{prefix}[/cyan] {message}", highlight=False)
