"""
Command runner -- executes a tool's shell command sequence.

Commands run one at a time through the user's shell, in order. The first
non-zero exit stops the sequence.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .errors import CommandFailedError

logger = logging.getLogger("tkit.runner")

StepCallback = Callable[[int, str], None]
Runner = Callable[..., "list[CommandResult]"]


@dataclass
class CommandResult:
    """Outcome of one shell command.

    Attributes:
        command: The command line as configured.
        returncode: Process exit status.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_commands(
    commands: Sequence[str],
    on_step: Optional[StepCallback] = None,
) -> list[CommandResult]:
    """Run each command in sequence.

    Args:
        commands: Shell command lines.
        on_step: Called with the 1-based step number and command before
            each command starts.

    Returns:
        Results for every command that ran.

    Raises:
        CommandFailedError: At the first command exiting non-zero.
    """
    results: list[CommandResult] = []
    for index, command in enumerate(commands, start=1):
        if on_step is not None:
            on_step(index, command)
        logger.debug("Step %d: %s", index, command)

        proc = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            check=False,
        )
        result = CommandResult(
            command=command,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
        results.append(result)

        if not result.success:
            logger.error("Command failed (%d): %s", result.returncode, command)
            raise CommandFailedError(command, result.returncode, result.stderr)

    return results
