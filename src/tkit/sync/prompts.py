"""
Prompt providers for interactive sync setup.

The sync engine asks for missing repositories and tokens through a
``Prompter``. An engine built without one never asks and treats missing
input as unconfigured.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import click


class Prompter(ABC):
    """Asks the user for input."""

    @abstractmethod
    def ask(self, message: str, secret: bool = False, default: Optional[str] = None) -> str:
        """Ask for a line of text. ``secret`` input is not echoed."""

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question."""


class ClickPrompter(Prompter):
    """Terminal prompts via click. Secrets are read without echo."""

    def ask(self, message: str, secret: bool = False, default: Optional[str] = None) -> str:
        value = click.prompt(
            message,
            hide_input=secret,
            default=default,
            show_default=default is not None,
        )
        return str(value).strip()

    def confirm(self, message: str, default: bool = False) -> bool:
        return click.confirm(message, default=default)
