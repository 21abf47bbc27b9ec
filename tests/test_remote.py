"""Tests for the GitHub remote store (HTTP mocked)."""

from __future__ import annotations

import base64
from unittest.mock import MagicMock, patch

import pytest
import requests

from tkit import __version__
from tkit.errors import AuthError, ConflictError, DeserializationError, HttpError, TransportError
from tkit.sync.remote import GitHubRemote, RemoteFile


def _response(status: int, payload=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.json.return_value = payload
    return resp


@pytest.fixture
def remote() -> GitHubRemote:
    return GitHubRemote(api_url="https://api.example.test/")


class TestRemoteFile:
    def test_decoded_ignores_line_wrapping(self):
        raw = b"tools: {}\n" * 20
        encoded = base64.b64encode(raw).decode("ascii")
        wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"
        assert RemoteFile(sha="abc", content=wrapped).decoded() == raw


class TestHeaders:
    @patch("tkit.sync.remote.requests.request")
    def test_every_request_carries_identity(self, mock_request: MagicMock, remote):
        mock_request.return_value = _response(404)
        remote.fetch_meta("alice/tools", "tkit-config.yaml", "tok123")

        method, url = mock_request.call_args.args
        kwargs = mock_request.call_args.kwargs
        assert method == "GET"
        assert url == "https://api.example.test/repos/alice/tools/contents/tkit-config.yaml"
        assert kwargs["headers"]["Authorization"] == "Bearer tok123"
        assert kwargs["headers"]["User-Agent"] == f"tkit/{__version__}"
        assert kwargs["timeout"] == 30


class TestFetchMeta:
    @patch("tkit.sync.remote.requests.request")
    def test_missing_file(self, mock_request, remote):
        mock_request.return_value = _response(404, text="Not Found")
        assert remote.fetch_meta("alice/tools", "tkit-config.yaml", "t") is None

    @patch("tkit.sync.remote.requests.request")
    def test_existing_file(self, mock_request, remote):
        content = base64.b64encode(b"tools: {}\n").decode("ascii")
        mock_request.return_value = _response(
            200, {"sha": "deadbeef", "content": content, "encoding": "base64"},
        )
        meta = remote.fetch_meta("alice/tools", "tkit-config.yaml", "t")
        assert meta.sha == "deadbeef"
        assert meta.decoded() == b"tools: {}\n"

    @patch("tkit.sync.remote.requests.request")
    def test_unexpected_payload(self, mock_request, remote):
        mock_request.return_value = _response(200, {"type": "dir"})
        with pytest.raises(DeserializationError):
            remote.fetch_meta("alice/tools", "tkit-config.yaml", "t")

    @patch("tkit.sync.remote.requests.request")
    def test_server_error(self, mock_request, remote):
        mock_request.return_value = _response(502, text="Bad Gateway")
        with pytest.raises(HttpError) as excinfo:
            remote.fetch_meta("alice/tools", "tkit-config.yaml", "t")
        assert excinfo.value.status == 502
        assert excinfo.value.body == "Bad Gateway"

    @patch("tkit.sync.remote.requests.request")
    def test_network_failure(self, mock_request, remote):
        mock_request.side_effect = requests.ConnectionError("name resolution failed")
        with pytest.raises(TransportError, match="name resolution failed"):
            remote.fetch_meta("alice/tools", "tkit-config.yaml", "t")


class TestPutContent:
    @patch("tkit.sync.remote.requests.request")
    def test_create_without_sha(self, mock_request, remote):
        mock_request.return_value = _response(201, {"content": {"sha": "new1"}})
        version = remote.put_content("alice/tools", "tkit-config.yaml", b"tools: {}\n", "t", "msg")

        assert version == "new1"
        assert mock_request.call_args.args[0] == "PUT"
        body = mock_request.call_args.kwargs["json"]
        assert body["message"] == "msg"
        assert base64.b64decode(body["content"]) == b"tools: {}\n"
        assert "sha" not in body

    @patch("tkit.sync.remote.requests.request")
    def test_update_sends_expected_version(self, mock_request, remote):
        mock_request.return_value = _response(200, {"content": {"sha": "new2"}})
        remote.put_content(
            "alice/tools", "tkit-config.yaml", b"x", "t", "msg", expected_version="old1",
        )
        assert mock_request.call_args.kwargs["json"]["sha"] == "old1"

    @patch("tkit.sync.remote.requests.request")
    def test_conflict(self, mock_request, remote):
        mock_request.return_value = _response(409, text="does not match old1")
        with pytest.raises(ConflictError) as excinfo:
            remote.put_content("alice/tools", "p", b"x", "t", "msg", expected_version="old1")
        assert excinfo.value.status == 409

    @patch("tkit.sync.remote.requests.request")
    def test_file_created_since_fetch_is_a_conflict(self, mock_request, remote):
        mock_request.return_value = _response(
            422, text='{"message":"Invalid request.\\n\\n\\"sha\\" wasn\'t supplied."}',
        )
        with pytest.raises(ConflictError) as excinfo:
            remote.put_content("alice/tools", "p", b"x", "t", "msg", expected_version=None)
        assert excinfo.value.status == 422

    @pytest.mark.parametrize("status", [401, 403])
    @patch("tkit.sync.remote.requests.request")
    def test_auth_failure(self, mock_request, status, remote):
        mock_request.return_value = _response(status, text="Bad credentials")
        with pytest.raises(AuthError):
            remote.put_content("alice/tools", "p", b"x", "t", "msg")

    @patch("tkit.sync.remote.requests.request")
    def test_other_failure_keeps_body(self, mock_request, remote):
        mock_request.return_value = _response(422, text='{"message": "Invalid request"}')
        with pytest.raises(HttpError, match="Invalid request") as excinfo:
            remote.put_content("alice/tools", "p", b"x", "t", "msg")
        assert not isinstance(excinfo.value, (AuthError, ConflictError))


class TestRepositories:
    @pytest.mark.parametrize("status", [401, 403, 404])
    @patch("tkit.sync.remote.requests.request")
    def test_validate_access_rejected(self, mock_request, status, remote):
        mock_request.return_value = _response(status)
        with pytest.raises(AuthError, match="alice/tools"):
            remote.validate_access("alice/tools", "t")

    @patch("tkit.sync.remote.requests.request")
    def test_validate_access_ok(self, mock_request, remote):
        mock_request.return_value = _response(200, {"full_name": "alice/tools"})
        remote.validate_access("alice/tools", "t")
        assert mock_request.call_args.args[1].endswith("/repos/alice/tools")

    @patch("tkit.sync.remote.requests.request")
    def test_create_repository(self, mock_request, remote):
        mock_request.return_value = _response(201, {
            "full_name": "alice/tkit-config",
            "name": "tkit-config",
            "private": True,
            "html_url": "https://github.com/alice/tkit-config",
        })
        info = remote.create_repository("tkit-config", True, "t")

        assert info.full_name == "alice/tkit-config"
        assert info.private is True
        method, url = mock_request.call_args.args
        assert (method, url) == ("POST", "https://api.example.test/user/repos")
        body = mock_request.call_args.kwargs["json"]
        assert body["name"] == "tkit-config"
        assert body["private"] is True
        assert body["auto_init"] is True

    @patch("tkit.sync.remote.requests.request")
    def test_list_repositories_keeps_order(self, mock_request, remote):
        mock_request.return_value = _response(200, [
            {"full_name": "alice/newest", "private": False},
            {"full_name": "alice/older", "private": True, "description": "old"},
        ])
        repos = remote.list_repositories("t")

        assert [r.full_name for r in repos] == ["alice/newest", "alice/older"]
        assert repos[1].description == "old"
        assert mock_request.call_args.kwargs["params"]["sort"] == "updated"
