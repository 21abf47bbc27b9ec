"""
Pydantic models for the tool registry and its sync settings.

The same document shape is used on disk and in the remote repository:

    tools:
      git:
        name: git
        description: Version control system
        install_commands: [...]
        remove_commands: [...]
        update_commands: [...]
        run_commands: [...]
        installed: false
    sync:
      repo: owner/name
      token: ghp_...
      last_sync: '2026-10-18T09:00:00+00:00'
      auto_sync: true

Older documents without ``run_commands`` or ``sync`` load with defaults.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import DeserializationError, DuplicateToolError, ToolNotFoundError


class Tool(BaseModel):
    """One managed tool and the shell commands that drive its lifecycle."""

    name: str
    description: Optional[str] = None
    install_commands: list[str] = Field(default_factory=list)
    remove_commands: list[str] = Field(default_factory=list)
    update_commands: list[str] = Field(default_factory=list)
    run_commands: list[str] = Field(default_factory=list)
    installed: bool = False

    def commands_for(self, action: str) -> list[str]:
        """Command sequence for ``install``, ``remove``, ``update`` or ``run``."""
        try:
            return getattr(self, f"{action}_commands")
        except AttributeError:
            raise ValueError(f"Unknown action: {action}") from None


class SyncSettings(BaseModel):
    """Where and how the registry is mirrored to GitHub.

    ``last_sync`` is kept as text: tkit writes ISO-8601, but a hand-edited
    value must not make the whole document unreadable.
    """

    repo: Optional[str] = None
    token: Optional[str] = None
    last_sync: Optional[str] = None
    auto_sync: bool = False

    @field_validator("last_sync", mode="before")
    @classmethod
    def _timestamp_as_text(cls, value):
        # unquoted YAML timestamps arrive as date or datetime objects
        if isinstance(value, date):
            return value.isoformat()
        return value

    @property
    def configured(self) -> bool:
        """Repository and token are both present."""
        return bool(self.repo) and bool(self.token)


class Registry(BaseModel):
    """The full document: every tool keyed by name, plus sync settings.

    Keys are case-sensitive and never normalized. A key is expected to
    match its tool's ``name`` when created; later divergence is tolerated.
    """

    tools: dict[str, Tool] = Field(default_factory=dict)
    sync: SyncSettings = Field(default_factory=SyncSettings)

    def add_tool(self, tool: Tool, name: Optional[str] = None) -> None:
        """Register a tool under ``name`` (defaults to ``tool.name``).

        Raises:
            DuplicateToolError: If the key is already taken.
        """
        key = name or tool.name
        if key in self.tools:
            raise DuplicateToolError(key)
        self.tools[key] = tool

    def remove_tool(self, name: str) -> bool:
        """Drop a tool. Returns whether anything was removed."""
        return self.tools.pop(name, None) is not None

    def get_tool(self, name: str) -> Optional[Tool]:
        """The live tool object (mutations stick), or None."""
        return self.tools.get(name)

    def require_tool(self, name: str, hint: str = "") -> Tool:
        tool = self.tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name, hint)
        return tool

    def list_tools(self) -> list[tuple[str, Tool]]:
        """All entries sorted by key for stable display."""
        return sorted(self.tools.items())

    def should_auto_sync(self) -> bool:
        """True only when repo, token and the auto-sync flag are all set."""
        return self.sync.auto_sync and self.sync.configured

    def sanitized(self) -> "Registry":
        """Deep copy with the token cleared, safe to publish."""
        safe = self.model_copy(deep=True)
        safe.sync.token = None
        return safe

    def to_yaml(self) -> str:
        data = self.model_dump(mode="json")
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, text: str) -> "Registry":
        """Parse a registry document.

        An empty document is an empty registry.

        Raises:
            DeserializationError: On YAML syntax errors, a document that is
                not a mapping, or fields of the wrong type.
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise DeserializationError(f"Invalid YAML: {exc}") from exc

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise DeserializationError(
                f"Expected a mapping at the top level, got {type(data).__name__}"
            )

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise DeserializationError(f"Invalid registry document: {exc}") from exc
