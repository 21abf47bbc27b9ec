"""
Tool lifecycle -- install, remove, update, run, add, delete.

Each operation loads the registry fresh, acts, saves if it changed
anything, and then gives the sync engine a chance to auto-push.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .errors import AlreadyInitializedError
from .models import Registry, Tool
from .runner import CommandResult, Runner, StepCallback, run_commands
from .store import RegistryStore
from .sync.engine import SyncEngine
from .sync.models import AutoSyncResult

logger = logging.getLogger("tkit.lifecycle")

DONE = "done"
SKIPPED = "skipped"


@dataclass
class ActionOutcome:
    """What a lifecycle operation did.

    Attributes:
        tool: Tool name.
        action: install, remove, update, run, add, delete or init.
        status: ``done`` or ``skipped``.
        reason: Why it was skipped.
        results: Command results, in execution order.
        auto_sync: Outcome of the auto-sync hook, if it ran.
    """

    tool: str
    action: str
    status: str = DONE
    reason: str = ""
    results: list[CommandResult] = field(default_factory=list)
    auto_sync: Optional[AutoSyncResult] = None

    @property
    def skipped(self) -> bool:
        return self.status == SKIPPED


class ToolManager:
    """Drives tool commands and keeps the ``installed`` flags current."""

    def __init__(
        self,
        store: RegistryStore,
        engine: Optional[SyncEngine] = None,
        runner: Runner = run_commands,
    ):
        self.store = store
        self.engine = engine
        self.runner = runner

    def _auto_sync(self) -> Optional[AutoSyncResult]:
        if self.engine is None:
            return None
        return self.engine.auto_sync()

    def _execute(
        self,
        tool: Tool,
        action: str,
        on_step: Optional[StepCallback],
    ) -> list[CommandResult]:
        commands = tool.commands_for(action)
        logger.info("%s %s (%d steps)", action, tool.name, len(commands))
        return self.runner(commands, on_step=on_step)

    def list_tools(self) -> list[Tool]:
        return [tool for _, tool in self.store.load().list_tools()]

    def install(self, name: str, on_step: Optional[StepCallback] = None) -> ActionOutcome:
        """Run a tool's install commands and mark it installed.

        Raises:
            ToolNotFoundError: Unknown tool.
            CommandFailedError: A command failed; the flag is not changed.
        """
        registry = self.store.load()
        tool = registry.require_tool(name, f"Use 'tkit add {name}' to add it first.")

        if tool.installed:
            return ActionOutcome(name, "install", SKIPPED, "is already installed")

        results = self._execute(tool, "install", on_step)
        tool.installed = True
        self.store.save(registry)

        return ActionOutcome(name, "install", results=results, auto_sync=self._auto_sync())

    def remove(self, name: str, on_step: Optional[StepCallback] = None) -> ActionOutcome:
        """Run a tool's remove commands and mark it not installed."""
        registry = self.store.load()
        tool = registry.require_tool(name)

        if not tool.installed:
            return ActionOutcome(name, "remove", SKIPPED, "is not installed")

        results = self._execute(tool, "remove", on_step)
        tool.installed = False
        self.store.save(registry)

        return ActionOutcome(name, "remove", results=results, auto_sync=self._auto_sync())

    def update(self, name: str, on_step: Optional[StepCallback] = None) -> ActionOutcome:
        """Run a tool's update commands. The registry is not modified."""
        tool = self.store.load().require_tool(name)

        if not tool.installed:
            return ActionOutcome(name, "update", SKIPPED, "is not installed. Install it first")
        if not tool.update_commands:
            return ActionOutcome(name, "update", SKIPPED, "has no update commands defined")

        return ActionOutcome(name, "update", results=self._execute(tool, "update", on_step))

    def run(self, name: str, on_step: Optional[StepCallback] = None) -> ActionOutcome:
        tool = self.store.load().require_tool(name)

        if not tool.run_commands:
            return ActionOutcome(name, "run", SKIPPED, "has no run commands defined")

        return ActionOutcome(name, "run", results=self._execute(tool, "run", on_step))

    def add(self, tool: Tool) -> ActionOutcome:
        """Register a new tool.

        Raises:
            DuplicateToolError: A tool with that name exists.
        """
        registry = self.store.load()
        registry.add_tool(tool)
        self.store.save(registry)
        logger.info("Added tool %s", tool.name)
        return ActionOutcome(tool.name, "add", auto_sync=self._auto_sync())

    def delete(self, name: str) -> ActionOutcome:
        """Drop a tool's configuration. A missing tool is a skip, not an error."""
        registry = self.store.load()
        if not registry.remove_tool(name):
            return ActionOutcome(name, "delete", SKIPPED, "not found")
        self.store.save(registry)
        logger.info("Deleted tool %s", name)
        return ActionOutcome(name, "delete", auto_sync=self._auto_sync())

    def initialize(
        self,
        tools: Iterable[Tool],
        overwrite: bool = False,
    ) -> ActionOutcome:
        """Write a fresh registry holding ``tools``.

        Args:
            tools: Initial tool entries.
            overwrite: Replace an existing document.

        Raises:
            AlreadyInitializedError: A document exists and ``overwrite``
                is False.
        """
        if self.store.exists() and not overwrite:
            raise AlreadyInitializedError(
                f"Configuration already exists at {self.store.path}. "
                "Use 'tkit reset' or pass --force to start fresh."
            )

        registry = Registry()
        for tool in tools:
            registry.add_tool(tool)
        self.store.save(registry)
        logger.info("Initialized registry with %d tools", len(registry.tools))

        return ActionOutcome(
            f"{len(registry.tools)} tools", "init", auto_sync=self._auto_sync(),
        )

    def reset(self) -> bool:
        """Delete the local registry document."""
        return self.store.delete()
