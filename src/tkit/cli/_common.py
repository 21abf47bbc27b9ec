"""Shared utilities for all CLI command modules.

Provides the Rich consoles, the ``--config`` option, factories for the
store, sync engine and tool manager, and the error boundary every
command runs inside.
"""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from ..errors import TkitError
from ..lifecycle import ActionOutcome, ToolManager
from ..runner import CommandResult
from ..store import RegistryStore
from ..sync.engine import SyncEngine
from ..sync.models import AutoSyncResult
from ..sync.prompts import ClickPrompter
from ..sync.remote import GitHubRemote, RemoteStore

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("tkit.cli")

config_option = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="TKIT_CONFIG",
    help="Registry file (defaults to the platform config directory).",
)


def create_remote() -> RemoteStore:
    return GitHubRemote()


def get_store(config_path: Optional[Path]) -> RegistryStore:
    return RegistryStore(config_path)


def get_engine(config_path: Optional[Path]) -> SyncEngine:
    return SyncEngine(get_store(config_path), remote=create_remote(), prompts=ClickPrompter())


def get_manager(config_path: Optional[Path]) -> ToolManager:
    engine = get_engine(config_path)
    return ToolManager(engine.store, engine=engine)


def handle_errors(func):
    """Print any ``TkitError`` to stderr and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TkitError as exc:
            logger.debug("Command failed", exc_info=True)
            err_console.print(f"[bold red]Error:[/] {escape(str(exc))}")
            sys.exit(1)

    return wrapper


def print_step(index: int, command: str) -> None:
    console.print(f"[cyan]  Step {index}: {escape(command)}[/]")


def print_output(results: list[CommandResult]) -> None:
    for result in results:
        out = result.stdout.strip()
        if out:
            console.print(f"    {escape(out)}", highlight=False)


def print_auto_sync(result: Optional[AutoSyncResult]) -> None:
    """Report the auto-sync hook. Silent when it did not run."""
    if result is None or not result.attempted:
        return
    if result.ok:
        console.print("[dim green]Auto-sync completed[/]")
    else:
        console.print(f"[yellow]Auto-sync failed: {escape(result.error or '')}[/]")


def print_skipped(outcome: ActionOutcome) -> None:
    console.print(f"[yellow]Tool '{escape(outcome.tool)}' {outcome.reason}.[/]")
