"""App catalog repository commands."""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from homeport.cli_support import (
    get_synchronizer,
    handle_cli_error,
    print_info,
    print_success,
    print_value,
    require_argument,
)
from homeport.core.config import get_config
from homeport.core.errors import RepoError

console = Console()
err_console = Console(stderr=True)


def register_repo_commands(app: typer.Typer, shared_console: Console, shared_err_console: Console) -> None:
    """Attach catalog commands to the root Typer app."""
    global console, err_console
    console = shared_console
    err_console = shared_err_console

    app.command("id")(repo_id)
    app.command("path")(repo_path)
    app.command("set")(repo_set)
    app.command("update")(repo_update)
    app.command("branch")(repo_branch)
    app.command("checkout")(repo_checkout)
    app.command("default-repo")(default_repo)


def repo_id() -> None:
    """Print the identifier of the active app repo."""
    print_value(console, get_synchronizer().repo_id())


def repo_path() -> None:
    """Print the local mirror path of the active app repo."""
    print_value(console, get_synchronizer().repo_path())


def repo_set(
    url: Optional[str] = typer.Argument(None, help="Git URL of the app repo."),
) -> None:
    """Persist URL as the active app repo (does not sync it)."""
    url = require_argument(url, "url", err_console)
    sync = get_synchronizer()

    try:
        sync.store.set(url)
    except RepoError as exc:
        handle_cli_error(exc, err_console)

    print_success(console, f"App repo set to {url}")


def repo_update() -> None:
    """Clone or pull the active app repo."""
    sync = get_synchronizer()

    try:
        path = sync.update()
    except RepoError as exc:
        handle_cli_error(exc, err_console)

    print_success(console, f"App repo up to date at {path}")


def repo_branch(
    name: Optional[str] = typer.Argument(None, help="Remote branch to check out."),
) -> None:
    """Check out a branch of the active app repo and update it."""
    name = require_argument(name, "name", err_console)
    sync = get_synchronizer()

    try:
        sync.branch(name)
    except RepoError as exc:
        handle_cli_error(exc, err_console)

    print_success(console, f"Switched app repo to branch {name}")


def repo_checkout(
    descriptor: Optional[str] = typer.Argument(
        None, help="owner/name, full git URL, optionally suffixed with #branch."
    ),
) -> None:
    """Switch to another app repo (and branch) in one step."""
    descriptor = require_argument(descriptor, "descriptor", err_console)
    sync = get_synchronizer()

    try:
        parsed = sync.checkout(descriptor)
    except RepoError as exc:
        handle_cli_error(exc, err_console)

    print_success(console, f"App repo set to {parsed.url}")
    if parsed.branch:
        print_info(console, f"Tracking branch {parsed.branch}")


def default_repo() -> None:
    """Print the app repo used when none has been set."""
    print_value(console, get_config().default_repo_url)
