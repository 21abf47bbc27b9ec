"""
Sync data models -- results and status reports of sync operations.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

_DATETIME = TypeAdapter(datetime)


class SyncStatus(BaseModel):
    """Read-only view of the sync settings. Never carries the token."""

    repo: Optional[str] = None
    has_token: bool = False
    last_sync: Optional[str] = None
    auto_sync: bool = False

    @property
    def last_sync_utc(self) -> Optional[datetime]:
        """``last_sync`` parsed and converted to UTC, or None if unparseable.

        Values without an offset are taken to be UTC.
        """
        if not self.last_sync:
            return None
        try:
            stamp = _DATETIME.validate_python(self.last_sync)
        except ValidationError:
            return None
        if stamp.tzinfo is None:
            return stamp.replace(tzinfo=timezone.utc)
        return stamp.astimezone(timezone.utc)

    @property
    def configured(self) -> bool:
        return bool(self.repo) and self.has_token

    @property
    def auto_sync_active(self) -> bool:
        return self.auto_sync and self.configured


class PushResult(BaseModel):
    """Outcome of a successful push.

    Attributes:
        repo: Target repository.
        version: Content SHA the remote assigned to the new file.
        previous_version: SHA the write was conditioned on, None if the
            file did not exist yet.
        synced_at: New ``last_sync`` value.
        attempts: Number of writes tried (more than one only with retries).
    """

    repo: str
    version: str
    previous_version: Optional[str] = None
    synced_at: datetime
    attempts: int = 1


class PullResult(BaseModel):
    """Outcome of a successful pull."""

    repo: str
    version: str
    tool_count: int
    synced_at: datetime
    backup_path: Optional[Path] = None


class AutoSyncResult(BaseModel):
    """What the auto-sync hook did.

    ``attempted`` is False when auto-sync is not fully configured.
    ``error`` holds the message of a failed push; the hook never raises.
    """

    attempted: bool = False
    push: Optional[PushResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.attempted and self.error is None
