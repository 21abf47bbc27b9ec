"""
Registry sync -- mirror the tool registry to a GitHub repository.

The token never leaves the machine: every push strips it before upload,
every pull keeps the local sync settings.
"""

from .engine import SyncEngine
from .remote import GitHubRemote, RemoteStore

__all__ = ["GitHubRemote", "RemoteStore", "SyncEngine"]
