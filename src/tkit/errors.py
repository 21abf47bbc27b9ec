"""
Error taxonomy for tkit.

Library layers raise these; the CLI catches ``TkitError`` once, prints the
message to stderr and exits non-zero. The auto-sync hook is the only place
that downgrades them to warnings.
"""

from __future__ import annotations


class TkitError(Exception):
    """Base class for every error tkit reports to the user."""


class DuplicateToolError(TkitError):
    """A tool with the same name already exists in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool '{name}' already exists.")


class ToolNotFoundError(TkitError):
    """The named tool is not in the registry."""

    def __init__(self, name: str, hint: str = ""):
        self.name = name
        message = f"Tool '{name}' not found."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class AlreadyInitializedError(TkitError):
    """A registry document already exists and overwrite was not requested."""


class DeserializationError(TkitError):
    """A local or remote registry document could not be parsed."""


class StoreIOError(TkitError):
    """Filesystem failure while loading or saving the registry."""


class CommandFailedError(TkitError):
    """A tool command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed: {command} (exit {returncode})"
        if stderr.strip():
            message = f"{message}\nError: {stderr.strip()}"
        super().__init__(message)


class NotConfiguredError(TkitError):
    """Sync repository or token missing. Run ``tkit sync setup`` first."""


class RemoteNotFoundError(TkitError):
    """The registry file does not exist in the remote repository."""


class TransportError(TkitError):
    """The request never produced an HTTP response (DNS, TLS, socket)."""


class HttpError(TkitError):
    """The remote answered with a non-success status.

    Attributes:
        status: HTTP status code.
        body: Response body, kept verbatim for diagnosis.
    """

    def __init__(self, status: int, body: str, action: str = "request"):
        self.status = status
        self.body = body
        self.action = action
        super().__init__(f"GitHub {action} failed ({status}): {body}")


class AuthError(HttpError):
    """The token was rejected or cannot see the repository."""


class ConflictError(HttpError):
    """The remote file changed since its version was read."""
