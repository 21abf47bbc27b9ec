"""Tool commands: install, remove, update, run, list, add, delete, examples."""

from __future__ import annotations

import click
from rich.markup import escape
from rich.table import Table

from ._common import (
    config_option,
    console,
    get_manager,
    handle_errors,
    print_auto_sync,
    print_output,
    print_skipped,
    print_step,
)
from ..catalog import by_category
from ..errors import DuplicateToolError
from ..models import Tool


def read_commands(action: str) -> list[str]:
    """Prompt for commands one per line until an empty line."""
    console.print(f"[bold cyan]{action} commands:[/]")
    commands: list[str] = []
    while True:
        line = click.prompt(
            f"  {len(commands) + 1}", default="", show_default=False,
        ).strip()
        if not line:
            return commands
        commands.append(line)


def register_tool_commands(main: click.Group) -> None:
    """Register the tool lifecycle commands."""

    def _lifecycle(action: str, verb: str):
        @main.command(action, help=f"{action.capitalize()} a tool.")
        @click.argument("tool")
        @config_option
        @handle_errors
        def command(tool: str, config_path):
            manager = get_manager(config_path)
            console.print(f"[bold blue]{verb} {escape(tool)}...[/]")
            outcome = getattr(manager, action)(tool, on_step=print_step)
            if outcome.skipped:
                print_skipped(outcome)
                return
            print_output(outcome.results)
            console.print(f"[bold green]✓ {action.capitalize()} completed successfully![/]")
            print_auto_sync(outcome.auto_sync)

        return command

    _lifecycle("install", "Installing")
    _lifecycle("remove", "Removing")
    _lifecycle("update", "Updating")
    _lifecycle("run", "Running")

    @main.command("list")
    @config_option
    @handle_errors
    def list_cmd(config_path):
        """List configured tools."""
        tools = get_manager(config_path).list_tools()
        if not tools:
            console.print("[yellow]No tools configured. Use 'tkit add <tool>' to add some![/]")
            return

        table = Table(title="Available tools", show_lines=False)
        table.add_column("", width=1)
        table.add_column("Tool", style="bold")
        table.add_column("Description")
        for tool in tools:
            mark = "[green]✓[/]" if tool.installed else "[red]✗[/]"
            table.add_row(mark, escape(tool.name), escape(tool.description or "No description"))
        console.print(table)

    @main.command("add")
    @click.argument("tool")
    @click.option("--description", "-d", default=None, help="What the tool is.")
    @click.option("--install", "install_cmds", multiple=True, help="Install command (repeatable).")
    @click.option("--remove", "remove_cmds", multiple=True, help="Remove command (repeatable).")
    @click.option("--update", "update_cmds", multiple=True, help="Update command (repeatable).")
    @click.option("--run", "run_cmds", multiple=True, help="Run command (repeatable).")
    @config_option
    @handle_errors
    def add(tool, description, install_cmds, remove_cmds, update_cmds, run_cmds, config_path):
        """Add a new tool configuration.

        Without options the commands are asked for interactively.

        Examples:

            tkit add ripgrep

            tkit add jq -d "JSON processor" --install "sudo apt-get install -y jq"
        """
        manager = get_manager(config_path)
        if manager.store.load().get_tool(tool) is not None:
            console.print(f"[yellow]Tool '{escape(tool)}' already exists.[/]")
            return

        scripted = description is not None or any(
            (install_cmds, remove_cmds, update_cmds, run_cmds)
        )
        if scripted:
            install, remove, update, run = (
                list(install_cmds), list(remove_cmds), list(update_cmds), list(run_cmds),
            )
        else:
            console.print(f"[bold blue]Adding tool '{escape(tool)}'...[/]")
            description = click.prompt("Description").strip()
            console.print("Enter commands for each action (empty line to finish):")
            install = read_commands("Install")
            remove = read_commands("Remove")
            update = read_commands("Update")
            run = read_commands("Run")

        entry = Tool(
            name=tool,
            description=description or None,
            install_commands=install,
            remove_commands=remove,
            update_commands=update,
            run_commands=run,
        )
        try:
            outcome = manager.add(entry)
        except DuplicateToolError as exc:
            console.print(f"[yellow]{escape(str(exc))}[/]")
            return

        console.print(f"[bold green]✓ Tool '{escape(tool)}' added successfully![/]")
        print_auto_sync(outcome.auto_sync)

    @main.command("delete")
    @click.argument("tool")
    @config_option
    @handle_errors
    def delete(tool, config_path):
        """Delete a tool configuration."""
        outcome = get_manager(config_path).delete(tool)
        if outcome.skipped:
            console.print(f"[yellow]Tool '{escape(tool)}' not found.[/]")
            return
        console.print(f"[bold green]✓ Tool '{escape(tool)}' deleted successfully![/]")
        print_auto_sync(outcome.auto_sync)

    @main.command("examples")
    def examples():
        """Show examples of tool configurations."""
        console.print("[bold blue]Tool Configuration Examples:[/]\n")
        for category, entries in by_category().items():
            console.print(f"[bold cyan]{category}:[/]")
            for example in entries:
                console.print(f"  [green]{example.name}:[/]")
                console.print(f"    tkit add {example.name}", highlight=False)
                console.print(f"    Description: {example.description}", highlight=False)
                console.print(
                    f"    Install: {escape(' && '.join(example.install))}", highlight=False,
                )
                if example.run:
                    console.print(f"    Run: {escape(' && '.join(example.run))}", highlight=False)
                console.print()
