"""Sync commands: setup, create-repo, update-token, push, pull, status, repos, auto."""

from __future__ import annotations

import click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ._common import config_option, console, get_engine, handle_errors, print_auto_sync


def register_sync_commands(main: click.Group) -> None:
    """Register the sync command group."""

    @main.group()
    def sync():
        """GitHub sync -- back up your tool registry to a repository.

        The registry is stored as tkit-config.yaml in the repository.
        Your token stays on this machine and is never uploaded.
        """

    @sync.command("setup")
    @click.argument("repo")
    @click.option("--token", default=None, help="GitHub personal access token (prompted if omitted).")
    @click.option(
        "--auto-sync/--no-auto-sync",
        default=None,
        help="Push automatically after every change.",
    )
    @config_option
    @handle_errors
    def sync_setup(repo, token, auto_sync, config_path):
        """Connect the registry to a GitHub repository.

        Examples:

            tkit sync setup alice/dotfiles-tools

            tkit sync setup alice/tools --token ghp_xxx --auto-sync
        """
        engine = get_engine(config_path)
        console.print(f"[bold blue]Setting up GitHub sync for {escape(repo)}...[/]")
        settings = engine.setup(repo, token, auto_sync=auto_sync)
        console.print("[bold green]✓ GitHub sync configured successfully![/]")
        if settings.auto_sync:
            console.print("  [dim]Auto-sync is on: changes are pushed automatically.[/]")
        else:
            console.print("  Use 'tkit sync push' to upload your configuration.")
        print_auto_sync(engine.auto_sync())

    @sync.command("create-repo")
    @click.argument("name")
    @click.option("--private", is_flag=True, help="Create a private repository.")
    @config_option
    @handle_errors
    def sync_create_repo(name, private, config_path):
        """Create a GitHub repository and use it for sync."""
        engine = get_engine(config_path)
        console.print(f"[bold blue]Creating repository '{escape(name)}'...[/]")
        info = engine.create_repository(name, private=private)
        visibility = "private" if info.private else "public"
        console.print(
            f"[bold green]✓ Repository '{escape(info.full_name)}' created ({visibility})![/]"
        )
        if info.html_url:
            console.print(f"  [cyan]{escape(info.html_url)}[/]")
        console.print("  Use 'tkit sync push' to upload your configuration.")

    @sync.command("update-token")
    @click.option("--token", default=None, help="New token (prompted if omitted).")
    @config_option
    @handle_errors
    def sync_update_token(token, config_path):
        """Replace the stored GitHub token."""
        settings = get_engine(config_path).update_token(token)
        console.print(f"[bold green]✓ Token updated for {escape(settings.repo or '')}[/]")

    @sync.command("push")
    @click.option(
        "--retry",
        "retries",
        default=0,
        type=click.IntRange(min=0),
        help="Retry this many times if the remote changed during the push.",
    )
    @config_option
    @handle_errors
    def sync_push(retries, config_path):
        """Push the local configuration to GitHub."""
        engine = get_engine(config_path)
        console.print("[bold blue]Pushing configuration to GitHub...[/]")
        result = engine.push(retries=retries)
        console.print(f"[bold green]✓ Configuration pushed to {escape(result.repo)}[/]")
        console.print(f"  [dim]Version: {result.version}[/]")

    @sync.command("pull")
    @config_option
    @handle_errors
    def sync_pull(config_path):
        """Pull the configuration from GitHub, replacing local tools."""
        engine = get_engine(config_path)
        console.print("[bold blue]Pulling configuration from GitHub...[/]")
        result = engine.pull()
        if result.backup_path is not None:
            console.print(f"  [dim]Backup saved to {escape(str(result.backup_path))}[/]")
        console.print(
            f"[bold green]✓ Pulled {result.tool_count} tool(s) from {escape(result.repo)}[/]"
        )

    @sync.command("status")
    @config_option
    @handle_errors
    def sync_status(config_path):
        """Show GitHub sync status."""
        state = get_engine(config_path).status()

        if not state.repo:
            console.print("[yellow]GitHub sync: Not configured[/]")
            console.print("Run 'tkit sync setup <owner/repo>' to set it up.")
            return

        token = "[green]✓ Configured[/]" if state.has_token else "[red]✗ Not set[/]"
        stamp = state.last_sync_utc
        if stamp is not None:
            last = stamp.strftime("%Y-%m-%d %H:%M:%S UTC")
        elif state.last_sync:
            last = escape(state.last_sync)
        else:
            last = "[dim]Never[/]"
        auto = "[green]Enabled[/]" if state.auto_sync else "[dim]Disabled[/]"
        console.print(
            Panel(
                f"Repository: [cyan]{escape(state.repo)}[/]\n"
                f"Token: {token}\n"
                f"Last sync: {last}\n"
                f"Auto-sync: {auto}",
                title="GitHub Sync",
                border_style="blue",
            )
        )
        if state.auto_sync and not state.has_token:
            console.print("[yellow]Auto-sync is enabled but will not run until a token is set.[/]")

    @sync.command("repos")
    @config_option
    @handle_errors
    def sync_repos(config_path):
        """List repositories the stored token can see."""
        repos = get_engine(config_path).list_repositories()
        if not repos:
            console.print("[yellow]No repositories found.[/]")
            return

        table = Table(title="Your repositories")
        table.add_column("", width=1)
        table.add_column("Repository", style="bold")
        table.add_column("Visibility")
        table.add_column("Description")
        for repo in repos:
            table.add_row(
                "[green]*[/]" if repo.current else "",
                escape(repo.full_name),
                "private" if repo.private else "public",
                escape(repo.description or ""),
            )
        console.print(table)

    @sync.command("auto")
    @click.argument("state", type=click.Choice(["on", "off"]))
    @config_option
    @handle_errors
    def sync_auto(state, config_path):
        """Turn auto-sync on or off."""
        engine = get_engine(config_path)
        settings = engine.set_auto_sync(state == "on")
        if settings.auto_sync:
            console.print("[bold green]✓ Auto-sync enabled[/]")
            if not settings.configured:
                console.print(
                    "[yellow]GitHub sync is not configured yet. "
                    "Run 'tkit sync setup <owner/repo>' first.[/]"
                )
        else:
            console.print("[bold green]✓ Auto-sync disabled[/]")
