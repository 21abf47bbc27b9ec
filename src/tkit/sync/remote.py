"""
Remote stores -- where the registry travels.

A remote store keeps one file per repository and versions it by content
SHA. Writes may carry the SHA the caller last saw; the store refuses the
write if the file has moved on since (optimistic concurrency).

GitHub: the REST contents API. One request per call, no retries.
"""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel

from .. import __version__
from ..errors import (
    AuthError,
    ConflictError,
    DeserializationError,
    HttpError,
    TransportError,
)

logger = logging.getLogger("tkit.sync.remote")

REMOTE_PATH = "tkit-config.yaml"
GITHUB_API_URL = "https://api.github.com"
USER_AGENT = f"tkit/{__version__}"


class RemoteFile(BaseModel):
    """A file as the remote store reports it.

    Attributes:
        sha: Content version tag assigned by the store.
        content: Base64 payload, possibly wrapped with newlines.
    """

    sha: str
    content: str = ""

    def decoded(self) -> bytes:
        return base64.b64decode(self.content.replace("\n", ""))


class RepositoryInfo(BaseModel):
    """A repository the token can see."""

    full_name: str
    name: str = ""
    description: Optional[str] = None
    private: bool = False
    html_url: str = ""
    clone_url: str = ""
    current: bool = False


class RemoteStore(ABC):
    """Abstract remote document store."""

    @abstractmethod
    def fetch_meta(self, repo: str, path: str, token: str) -> Optional[RemoteFile]:
        """Fetch a file's version tag and content.

        Returns:
            The file, or None if it does not exist.
        """

    @abstractmethod
    def put_content(
        self,
        repo: str,
        path: str,
        content: bytes,
        token: str,
        message: str,
        expected_version: Optional[str] = None,
    ) -> str:
        """Create or replace a file.

        Args:
            repo: ``owner/name``.
            path: File path inside the repository.
            content: Raw document bytes (encoded by the store).
            token: Access token.
            message: Commit message.
            expected_version: SHA the caller last saw. The write is
                rejected if the file has changed since.

        Returns:
            The new content version.

        Raises:
            ConflictError: If ``expected_version`` is stale.
        """

    @abstractmethod
    def validate_access(self, repo: str, token: str) -> None:
        """Confirm the token can reach the repository.

        Raises:
            AuthError: If it cannot.
        """

    @abstractmethod
    def create_repository(self, name: str, private: bool, token: str) -> RepositoryInfo:
        """Create a repository owned by the token's user."""

    @abstractmethod
    def list_repositories(self, token: str) -> list[RepositoryInfo]:
        """Repositories visible to the token, most recently updated first."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable store name."""


class GitHubRemote(RemoteStore):
    """GitHub contents API backend."""

    def __init__(
        self,
        api_url: str = GITHUB_API_URL,
        user_agent: str = USER_AGENT,
        timeout: float = 30,
    ):
        self.api_url = api_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "github"

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "User-Agent": self.user_agent,
            "Accept": "application/vnd.github+json",
        }

    def _api_call(
        self,
        method: str,
        endpoint: str,
        token: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Make one authenticated GitHub API call.

        Args:
            method: HTTP method.
            endpoint: Path below the API root.
            token: Access token.
            data: JSON request body.
            params: Query string parameters.

        Returns:
            The raw response; status handling is up to the caller.

        Raises:
            TransportError: If no response was received.
        """
        url = f"{self.api_url}{endpoint}"
        logger.debug("%s %s", method, url)
        try:
            return requests.request(
                method,
                url,
                headers=self._headers(token),
                json=data,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"GitHub {method} {endpoint}: {exc}") from exc

    def fetch_meta(self, repo: str, path: str, token: str) -> Optional[RemoteFile]:
        resp = self._api_call("GET", f"/repos/{repo}/contents/{path}", token)
        if resp.status_code == 404:
            return None
        _raise_for_status(resp, "fetch")
        try:
            return RemoteFile.model_validate(resp.json())
        except ValueError as exc:
            raise DeserializationError(f"Unexpected contents response for {path}: {exc}") from exc

    def put_content(
        self,
        repo: str,
        path: str,
        content: bytes,
        token: str,
        message: str,
        expected_version: Optional[str] = None,
    ) -> str:
        payload: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
        }
        if expected_version:
            payload["sha"] = expected_version

        resp = self._api_call("PUT", f"/repos/{repo}/contents/{path}", token, data=payload)
        _raise_for_status(resp, "push")

        sha = resp.json().get("content", {}).get("sha", "")
        logger.info("Wrote %s:%s (sha %s)", repo, path, sha[:7])
        return sha

    def validate_access(self, repo: str, token: str) -> None:
        resp = self._api_call("GET", f"/repos/{repo}", token)
        if resp.status_code in (401, 403, 404):
            raise AuthError(
                resp.status_code,
                f"Cannot access repository '{repo}'. Check your token and repository name.",
                "access check",
            )
        _raise_for_status(resp, "access check")

    def create_repository(self, name: str, private: bool, token: str) -> RepositoryInfo:
        payload = {
            "name": name,
            "description": f"tkit configuration repository for {name}",
            "private": private,
            "auto_init": True,
        }
        resp = self._api_call("POST", "/user/repos", token, data=payload)
        _raise_for_status(resp, "create repository")
        repo = RepositoryInfo.model_validate(resp.json())
        logger.info("Created repository %s", repo.full_name)
        return repo

    def list_repositories(self, token: str) -> list[RepositoryInfo]:
        resp = self._api_call(
            "GET", "/user/repos", token, params={"sort": "updated", "per_page": 100},
        )
        _raise_for_status(resp, "list repositories")
        return [RepositoryInfo.model_validate(item) for item in resp.json()]


def _raise_for_status(resp: requests.Response, action: str) -> None:
    """Map a non-success response onto the error taxonomy.

    GitHub answers a stale ``sha`` with 409, and a missing ``sha`` for a
    file that now exists with 422. Both are version conflicts.
    """
    status = resp.status_code
    if 200 <= status < 300:
        return
    body = resp.text
    if status == 409 or (status == 422 and action == "push" and "sha" in body):
        raise ConflictError(status, body, action)
    if status in (401, 403):
        raise AuthError(status, body, action)
    raise HttpError(status, body, action)
