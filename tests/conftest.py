"""Shared test fixtures for tkit."""

from __future__ import annotations

import base64
import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

import pytest

from tkit.errors import AuthError, ConflictError
from tkit.models import Registry, SyncSettings, Tool
from tkit.store import RegistryStore
from tkit.sync.prompts import Prompter
from tkit.sync.remote import RemoteFile, RemoteStore, RepositoryInfo

FROZEN_NOW = datetime(2026, 10, 18, 9, 0, 0, tzinfo=timezone.utc)


class FakeRemote(RemoteStore):
    """In-memory remote store with content-SHA versioning.

    ``before_put`` runs just before a write is checked, which lets a test
    slip in a concurrent write between the version read and the put.
    """

    def __init__(self, owner: str = "alice"):
        self.owner = owner
        self.files: dict[tuple[str, str], tuple[str, bytes]] = {}
        self.puts: list[dict] = []
        self.fetches = 0
        self.rejected_tokens: set[str] = set()
        self.repositories: list[RepositoryInfo] = []
        self.before_put: Optional[Callable[[], None]] = None
        self.fail_with: Optional[Exception] = None

    @property
    def name(self) -> str:
        return "fake"

    @staticmethod
    def sha_of(content: bytes) -> str:
        return hashlib.sha1(content).hexdigest()

    def seed(self, repo: str, path: str, content: bytes) -> str:
        """Place a file directly, as another machine would."""
        sha = self.sha_of(content)
        self.files[(repo, path)] = (sha, content)
        return sha

    def content(self, repo: str, path: str) -> Optional[bytes]:
        entry = self.files.get((repo, path))
        return entry[1] if entry else None

    def fetch_meta(self, repo: str, path: str, token: str) -> Optional[RemoteFile]:
        self.fetches += 1
        if self.fail_with is not None:
            raise self.fail_with
        entry = self.files.get((repo, path))
        if entry is None:
            return None
        sha, content = entry
        encoded = base64.b64encode(content).decode("ascii")
        # GitHub wraps the payload every 60 characters
        wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60))
        return RemoteFile(sha=sha, content=wrapped)

    def put_content(self, repo, path, content, token, message, expected_version=None):
        if self.before_put is not None:
            hook, self.before_put = self.before_put, None
            hook()
        self.puts.append({
            "repo": repo,
            "path": path,
            "message": message,
            "expected_version": expected_version,
        })
        current = self.files.get((repo, path))
        current_sha = current[0] if current else None
        if expected_version is None and current_sha is not None:
            raise ConflictError(422, "Invalid request. \"sha\" wasn't supplied.", "push")
        if expected_version != current_sha:
            raise ConflictError(409, f"{path} does not match {expected_version}", "push")
        return self.seed(repo, path, content)

    def validate_access(self, repo: str, token: str) -> None:
        if token in self.rejected_tokens:
            raise AuthError(401, "Bad credentials", "access check")

    def create_repository(self, name: str, private: bool, token: str) -> RepositoryInfo:
        info = RepositoryInfo(
            full_name=f"{self.owner}/{name}",
            name=name,
            private=private,
            html_url=f"https://github.com/{self.owner}/{name}",
        )
        self.repositories.insert(0, info)
        return info

    def list_repositories(self, token: str) -> list[RepositoryInfo]:
        return [repo.model_copy() for repo in self.repositories]


class ScriptedPrompter(Prompter):
    """Replays canned answers in order and records what was asked."""

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.asked: list[str] = []

    def _next(self, message: str):
        self.asked.append(message)
        if not self.answers:
            raise EOFError(f"No scripted answer for prompt: {message}")
        return self.answers.pop(0)

    def ask(self, message, secret=False, default=None):
        answer = self._next(message)
        if answer == "" and default is not None:
            return default
        return str(answer)

    def confirm(self, message, default=False):
        answer = self._next(message)
        if isinstance(answer, bool):
            return answer
        return str(answer).strip().lower() in ("y", "yes")


@pytest.fixture
def now() -> datetime:
    return FROZEN_NOW


@pytest.fixture
def clock(now: datetime) -> Callable[[], datetime]:
    """Clock frozen at ``now``."""
    return lambda: now


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Registry document path inside a fresh temp directory."""
    return tmp_path / "tkit" / "config.yaml"


@pytest.fixture
def store(config_path: Path) -> RegistryStore:
    return RegistryStore(config_path)


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def sample_registry() -> Registry:
    """Two tools, sync pointed at alice/tools with a token, auto-sync off."""
    registry = Registry(
        sync=SyncSettings(repo="alice/tools", token="ghp_secret123"),
    )
    registry.add_tool(Tool(
        name="ripgrep",
        description="Fast grep",
        install_commands=["sudo apt-get install -y ripgrep"],
        remove_commands=["sudo apt-get remove -y ripgrep"],
        run_commands=["rg --version"],
    ))
    registry.add_tool(Tool(
        name="jq",
        description="JSON processor",
        install_commands=["sudo apt-get install -y jq"],
        installed=True,
    ))
    return registry


@pytest.fixture
def configured_store(store: RegistryStore, sample_registry: Registry) -> RegistryStore:
    """Store holding ``sample_registry`` on disk."""
    store.save(sample_registry)
    return store


@pytest.fixture
def scripted_prompter() -> type[ScriptedPrompter]:
    """The ScriptedPrompter class, for building prompters with canned answers."""
    return ScriptedPrompter
