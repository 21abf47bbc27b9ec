"""
tkit CLI -- the tool manager command line.

The main Click group is defined here and every command group lives in
its own module, registered through a ``register_*`` function.

Entry point: tkit.cli:main
"""

from __future__ import annotations

import logging

import click

from .. import __version__


def _setup_logging(verbose: bool) -> None:
    """Send tkit log records to stderr when --verbose is given."""
    root = logging.getLogger("tkit")
    if not verbose or root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s")
    )
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


@click.group()
@click.version_option(version=__version__, prog_name="tkit")
@click.option("--verbose", "-v", is_flag=True, help="Log what tkit is doing to stderr.")
def main(verbose: bool):
    """A customizable tool manager.

    Keep the install, remove, update and run commands for your tools in
    one registry, and sync it to GitHub to take it anywhere.
    """
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .tools import register_tool_commands
from .setup import register_setup_commands
from .sync_cmd import register_sync_commands

register_tool_commands(main)
register_setup_commands(main)
register_sync_commands(main)
