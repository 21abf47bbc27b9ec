"""Setup commands: init wizard and reset."""

from __future__ import annotations

import click
from rich.markup import escape
from rich.panel import Panel

from ._common import config_option, console, get_manager, handle_errors, print_auto_sync
from .tools import read_commands
from ..catalog import starter_tools
from ..errors import TkitError
from ..models import Tool
from ..sync.engine import SyncEngine


def _github_wizard(engine: SyncEngine) -> bool:
    """Interactive GitHub setup. Returns whether sync ended up configured.

    Failures are reported and leave sync unconfigured; they never abort
    the wizard.
    """
    console.print("\nGitHub setup options:")
    console.print("  1. Create a new repository automatically")
    console.print("  2. Use an existing repository")
    console.print("  3. Skip for now")
    choice = click.prompt("Choose option", type=click.Choice(["1", "2", "3"]), default="3")

    try:
        if choice == "1":
            token = click.prompt("GitHub personal access token", hide_input=True).strip()
            name = click.prompt("Repository name", default="tkit-config").strip()
            private = click.confirm("Make repository private?", default=True)
            info = engine.create_repository(name, private=private, token=token)
            console.print(f"  [green]✓ Repository '{escape(info.full_name)}' created and configured![/]")
        elif choice == "2":
            repo = click.prompt("Repository (owner/name)").strip()
            token = click.prompt("GitHub personal access token", hide_input=True).strip()
            engine.setup(repo, token)
            console.print("  [green]✓ GitHub sync configured![/]")
        else:
            console.print("  Skipping GitHub setup.")
            return False
    except TkitError as exc:
        console.print(f"  [yellow]GitHub setup failed: {escape(str(exc))}[/]")
        return False

    auto = click.confirm("Enable automatic sync on configuration changes?", default=True)
    engine.set_auto_sync(auto)
    if auto:
        console.print("  [green]✓ Auto-sync enabled - your changes will be backed up automatically![/]")
    else:
        console.print("  [green]✓ Manual sync mode - use 'tkit sync push' to back up your config[/]")
    return True


def register_setup_commands(main: click.Group) -> None:
    """Register init and reset."""

    @main.command("init")
    @click.option("--yes", "-y", is_flag=True, help="Add the starter tools and skip the questions.")
    @click.option("--force", is_flag=True, help="Replace an existing configuration.")
    @config_option
    @handle_errors
    def init(yes, force, config_path):
        """Initialize the tkit configuration.

        Walks through adding starter tools, connecting a GitHub
        repository, and adding a first custom tool.

        Examples:

            tkit init

            tkit init --yes
        """
        manager = get_manager(config_path)
        engine = manager.engine

        overwrite = force
        if manager.store.exists() and not force:
            console.print("[yellow]Configuration already exists.[/]")
            if yes or not click.confirm("Do you want to reset and start fresh?", default=False):
                return
            overwrite = True

        console.print("[bold blue]Welcome to the tkit setup wizard![/]")
        console.print("\n[bold cyan]Step 1: Starter tools[/]")

        tools = []
        for example in starter_tools():
            if yes or click.confirm(
                f"Add {example.name} ({example.description})?", default=True,
            ):
                tools.append(example.to_tool())
                console.print(f"  [green]✓ Added {example.name}[/]")

        outcome = manager.initialize(tools, overwrite=overwrite)
        print_auto_sync(outcome.auto_sync)

        if not yes:
            console.print("\n[bold cyan]Step 2: GitHub integration (optional)[/]")
            console.print("tkit can sync your configuration to GitHub for backup across machines.")
            configured = False
            if click.confirm("Set up GitHub sync?", default=False):
                configured = _github_wizard(engine)

            console.print("\n[bold cyan]Step 3: Add your first custom tool (optional)[/]")
            added = False
            if click.confirm("Would you like to add a custom tool now?", default=False):
                name = click.prompt("Tool name").strip()
                description = click.prompt("Description").strip()
                console.print("Enter commands for each action (empty line to finish):")
                custom = Tool(
                    name=name,
                    description=description or None,
                    install_commands=read_commands("Install"),
                    remove_commands=read_commands("Remove"),
                    update_commands=read_commands("Update"),
                    run_commands=read_commands("Run"),
                )
                try:
                    print_auto_sync(manager.add(custom).auto_sync)
                    added = True
                    console.print(f"  [green]✓ Tool '{escape(name)}' added[/]")
                except TkitError as exc:
                    console.print(f"  [yellow]Failed to add tool: {escape(str(exc))}[/]")

            if configured and not added:
                print_auto_sync(engine.auto_sync())

        status = engine.status()
        console.print("\n[bold green]Setup complete![/]")
        console.print("[bold yellow]Next steps:[/]")
        console.print("  • Run 'tkit list' to see your configured tools")
        console.print("  • Run 'tkit examples' to see more tool ideas")
        console.print("  • Run 'tkit add <tool>' to add more custom tools")
        if status.repo:
            console.print(f"  • Your config syncs to GitHub: [cyan]{escape(status.repo)}[/]")

    @main.command("reset")
    @click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
    @config_option
    @handle_errors
    def reset(yes, config_path):
        """Reset configuration (clear all tools and settings)."""
        manager = get_manager(config_path)

        console.print(Panel(
            "This will permanently delete:\n"
            "  • All configured tools\n"
            "  • GitHub sync settings\n"
            "  • All configuration data",
            title="Reset Configuration",
            border_style="red",
        ))
        if not yes:
            answer = click.prompt(
                "Type 'yes' to confirm", default="", show_default=False,
            )
            if answer.strip().lower() != "yes":
                console.print("[yellow]Reset cancelled.[/]")
                return

        if manager.reset():
            console.print("[green]✓ Configuration file deleted[/]")
        else:
            console.print("[yellow]No configuration to delete.[/]")
        console.print("Run 'tkit init' to set up a fresh configuration.")
