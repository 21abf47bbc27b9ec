"""
Sync Engine -- keeps the local registry and its GitHub copy consistent.

    tkit sync push  ->  load -> strip token -> read remote sha -> put(sha) -> stamp
    tkit sync pull  ->  load -> fetch -> parse -> back up local -> remote tools
                        + local sync settings -> stamp -> save

Every operation is a complete, independent run. Concurrency control is
the remote's content SHA: a push is conditioned on the SHA read just
before it, so a write that lands in between is rejected instead of being
silently overwritten. Nothing retries unless the caller asks for it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ..errors import ConflictError, DeserializationError, NotConfiguredError, RemoteNotFoundError
from ..models import Registry, SyncSettings
from ..store import RegistryStore
from .models import AutoSyncResult, PullResult, PushResult, SyncStatus
from .prompts import Prompter
from .remote import REMOTE_PATH, GitHubRemote, RemoteStore, RepositoryInfo

logger = logging.getLogger("tkit.sync.engine")

SETUP_HINT = "Run 'tkit sync setup <owner/repo>' first."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncEngine:
    """Orchestrates push, pull and setup between a local store and a remote."""

    def __init__(
        self,
        store: RegistryStore,
        remote: Optional[RemoteStore] = None,
        prompts: Optional[Prompter] = None,
        clock: Optional[Callable[[], datetime]] = None,
        remote_path: str = REMOTE_PATH,
    ):
        """Initialize the sync engine.

        Args:
            store: Local registry persistence.
            remote: Remote document store. Defaults to GitHub.
            prompts: Used to ask for a missing repository or token.
                Without one, missing input is a ``NotConfiguredError``.
            clock: Returns the current time; used for ``last_sync``.
            remote_path: File path of the registry inside the repository.
        """
        self.store = store
        self.remote = remote or GitHubRemote()
        self.prompts = prompts
        self.clock = clock or _utcnow
        self.remote_path = remote_path

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _require_credentials(self, settings: SyncSettings) -> tuple[str, str]:
        if not settings.repo:
            raise NotConfiguredError(f"GitHub sync not configured. {SETUP_HINT}")
        if not settings.token:
            raise NotConfiguredError(f"GitHub token not found. {SETUP_HINT}")
        return settings.repo, settings.token

    def _ask(self, label: str, secret: bool = False) -> str:
        if self.prompts is None:
            raise NotConfiguredError(f"{label} is required.")
        value = self.prompts.ask(label, secret=secret).strip()
        if not value:
            raise NotConfiguredError(f"{label} is required.")
        return value

    def _commit_message(self, auto: bool) -> str:
        prefix = "Auto-sync" if auto else "Update"
        stamp = self.clock().strftime("%Y-%m-%d %H:%M:%S UTC")
        return f"{prefix} tkit config - {stamp}"

    # ------------------------------------------------------------------
    # push / pull
    # ------------------------------------------------------------------

    def push(self, retries: int = 0, auto: bool = False) -> PushResult:
        """Upload the local registry, token stripped.

        Args:
            retries: Extra attempts after a version conflict. Each retry
                re-reads the remote SHA and overwrites. The default 0
                surfaces the first conflict.
            auto: Label the commit as an auto-sync.

        Raises:
            NotConfiguredError: Repository or token missing; nothing is
                sent and the local document is untouched.
            ConflictError: The remote changed between read and write.
        """
        registry = self.store.load()
        repo, token = self._require_credentials(registry.sync)

        payload = registry.sanitized().to_yaml().encode("utf-8")
        message = self._commit_message(auto)

        attempts = 0
        while True:
            attempts += 1
            current = self.remote.fetch_meta(repo, self.remote_path, token)
            expected = current.sha if current else None
            try:
                version = self.remote.put_content(
                    repo,
                    self.remote_path,
                    payload,
                    token,
                    message,
                    expected_version=expected,
                )
                break
            except ConflictError:
                if attempts > retries:
                    raise
                logger.warning(
                    "Remote %s changed during push, retrying (%d/%d)",
                    repo, attempts, retries,
                )

        synced_at = self.clock()
        registry.sync.last_sync = synced_at.isoformat()
        self.store.save(registry)

        logger.info("Pushed %d tools to %s (%s)", len(registry.tools), repo, self.remote.name)
        return PushResult(
            repo=repo,
            version=version,
            previous_version=expected,
            synced_at=synced_at,
            attempts=attempts,
        )

    def pull(self) -> PullResult:
        """Replace local tools with the remote copy.

        The remote tool mapping wins in full. Local sync settings are kept
        as they are (the remote's are ignored) apart from ``last_sync``.
        The current local document is copied to the backup path first.

        Raises:
            NotConfiguredError: Repository or token missing.
            RemoteNotFoundError: The repository has no registry file.
            DeserializationError: The remote document is malformed.
        """
        registry = self.store.load()
        repo, token = self._require_credentials(registry.sync)

        remote_file = self.remote.fetch_meta(repo, self.remote_path, token)
        if remote_file is None:
            raise RemoteNotFoundError(
                f"{self.remote_path} not found in {repo}. "
                "Make sure the file exists and you have access."
            )

        try:
            text = remote_file.decoded().decode("utf-8")
        except ValueError as exc:
            raise DeserializationError(f"Cannot decode remote document: {exc}") from exc
        remote_registry = Registry.from_yaml(text)

        backup_path = self.store.backup()

        merged = Registry(
            tools=remote_registry.tools,
            sync=registry.sync.model_copy(),
        )
        synced_at = self.clock()
        merged.sync.last_sync = synced_at.isoformat()
        self.store.save(merged)

        logger.info("Pulled %d tools from %s (%s)", len(merged.tools), repo, self.remote.name)
        return PullResult(
            repo=repo,
            version=remote_file.sha,
            tool_count=len(merged.tools),
            synced_at=synced_at,
            backup_path=backup_path,
        )

    def status(self) -> SyncStatus:
        settings = self.store.load().sync
        return SyncStatus(
            repo=settings.repo,
            has_token=bool(settings.token),
            last_sync=settings.last_sync,
            auto_sync=settings.auto_sync,
        )

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------

    def setup(
        self,
        repo: Optional[str] = None,
        token: Optional[str] = None,
        auto_sync: Optional[bool] = None,
    ) -> SyncSettings:
        """Point sync at a repository.

        Missing values are prompted for. Access is validated before
        anything is stored, so a rejected token leaves settings as they
        were.

        Raises:
            AuthError: The token cannot reach the repository.
        """
        repo = repo or self._ask("GitHub repository (owner/name)")
        token = token or self._ask("GitHub personal access token", secret=True)

        self.remote.validate_access(repo, token)

        registry = self.store.load()
        registry.sync.repo = repo
        registry.sync.token = token
        if auto_sync is not None:
            registry.sync.auto_sync = auto_sync
        self.store.save(registry)

        logger.info("Sync configured for %s", repo)
        return registry.sync

    def update_token(self, token: Optional[str] = None) -> SyncSettings:
        """Replace the stored token after validating it against the repo."""
        registry = self.store.load()
        if not registry.sync.repo:
            raise NotConfiguredError(f"GitHub sync not configured. {SETUP_HINT}")

        token = token or self._ask("New GitHub personal access token", secret=True)
        self.remote.validate_access(registry.sync.repo, token)

        registry.sync.token = token
        self.store.save(registry)
        logger.info("Token updated for %s", registry.sync.repo)
        return registry.sync

    def create_repository(
        self,
        name: str,
        private: bool = False,
        token: Optional[str] = None,
    ) -> RepositoryInfo:
        """Create a repository and make it the sync target.

        Uses ``token`` if given, else the stored one.
        """
        registry = self.store.load()
        token = token or registry.sync.token
        if not token:
            token = self._ask("GitHub personal access token", secret=True)

        info = self.remote.create_repository(name, private, token)

        registry.sync.repo = info.full_name
        registry.sync.token = token
        self.store.save(registry)

        info.current = True
        return info

    def list_repositories(self) -> list[RepositoryInfo]:
        """Repositories visible to the stored token, current one flagged."""
        settings = self.store.load().sync
        if not settings.token:
            raise NotConfiguredError(f"GitHub token not found. {SETUP_HINT}")

        repos = self.remote.list_repositories(settings.token)
        for repo in repos:
            repo.current = repo.full_name == settings.repo
        return repos

    def set_auto_sync(self, enabled: bool) -> SyncSettings:
        registry = self.store.load()
        registry.sync.auto_sync = enabled
        self.store.save(registry)
        return registry.sync

    # ------------------------------------------------------------------
    # hook
    # ------------------------------------------------------------------

    def auto_sync(self) -> AutoSyncResult:
        """Push if auto-sync is fully configured. Never raises.

        Called after every command that changes the registry. A failed
        push must not fail that command, so every error is logged and
        returned on the result instead.
        """
        try:
            registry = self.store.load()
            if not registry.should_auto_sync():
                return AutoSyncResult(attempted=False)
            result = self.push(auto=True)
        except Exception as exc:
            logger.warning("Auto-sync failed: %s", exc)
            return AutoSyncResult(attempted=True, error=str(exc))
        return AutoSyncResult(attempted=True, push=result)
