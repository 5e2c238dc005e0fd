"""Tests for the paginated organisation listing."""

import http.client
import json
import socket
import urllib.error
from urllib.parse import parse_qs, urlparse

import pytest

from ghbackup.core import github_client
from ghbackup.core.deadline import Deadline
from ghbackup.core.errors import DeadlineExceeded, DecodeError, NetworkError, ProtocolError
from ghbackup.core.github_client import GitHubClient


class FakeResponse:
    def __init__(self, body: bytes, status: int = 200):
        self.body = body
        self.status = status

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _page(start: int, count: int) -> bytes:
    return json.dumps(
        [{"name": f"r{i}", "clone_url": f"https://github.com/acme/r{i}.git", "size": i} for i in range(start, start + count)]
    ).encode()


def _install(monkeypatch, pages):
    """Serve ``pages`` in order; record every request made."""
    calls = []

    def fake_urlopen(req, timeout=None):
        calls.append(req)
        item = pages[len(calls) - 1]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, FakeResponse):
            return item
        return FakeResponse(item)

    monkeypatch.setattr(github_client.urllib.request, "urlopen", fake_urlopen)
    return calls


def test_two_pages_150_repos(monkeypatch, capsys):
    calls = _install(monkeypatch, [_page(0, 100), _page(100, 50)])
    repos = GitHubClient("tok").list_org_repos("acme")

    assert len(calls) == 2
    assert len(repos) == 150
    assert [r.name for r in repos[:2]] == ["r0", "r1"]
    assert repos[-1].clone_url == "https://github.com/acme/r149.git"
    out = capsys.readouterr().out
    assert "fetching 1. batch" in out and "fetched 2. batch with 50 repos" in out


def test_request_carries_bearer_token_and_paging(monkeypatch):
    calls = _install(monkeypatch, [_page(0, 3)])
    GitHubClient("tok", api_base="https://ghe.example/api/v3/").list_org_repos("acme", per_page=30)

    req = calls[0]
    assert req.get_header("Authorization") == "Bearer tok"
    assert req.get_header("Accept") == "application/vnd.github+json"
    url = urlparse(req.full_url)
    assert url.netloc == "ghe.example"
    assert url.path == "/api/v3/orgs/acme/repos"
    assert parse_qs(url.query) == {"per_page": ["30"], "page": ["1"]}


def test_stops_at_max_pages_when_every_page_is_full(monkeypatch):
    calls = _install(monkeypatch, [_page(i * 5, 5) for i in range(10)])
    repos = GitHubClient("tok").list_org_repos("acme", per_page=5, max_pages=3)
    assert len(calls) == 3
    assert len(repos) == 15


def test_exact_multiple_costs_one_empty_request(monkeypatch):
    calls = _install(monkeypatch, [_page(0, 100), b"[]"])
    repos = GitHubClient("tok").list_org_repos("acme")
    assert len(calls) == 2
    assert len(repos) == 100


def test_never_fetches_past_short_page(monkeypatch):
    calls = _install(monkeypatch, [_page(0, 99), _page(99, 100)])
    repos = GitHubClient("tok").list_org_repos("acme")
    assert len(calls) == 1
    assert len(repos) == 99


def test_raw_fields_are_carried_through(monkeypatch):
    _install(monkeypatch, [_page(0, 1)])
    (repo,) = GitHubClient("tok").list_org_repos("acme")
    assert repo.raw["size"] == 0
    assert repo.to_json() == {"name": "r0", "clone_url": "https://github.com/acme/r0.git", "size": 0}


def test_http_error_is_protocol_error(monkeypatch):
    err = urllib.error.HTTPError("https://api.github.com/orgs/acme/repos", 404, "Not Found", {}, None)
    _install(monkeypatch, [_page(0, 100), err])
    with pytest.raises(ProtocolError) as excinfo:
        GitHubClient("tok").list_org_repos("acme")
    assert excinfo.value.status == 404
    assert excinfo.value.page == 2


def test_non_200_success_status_is_protocol_error(monkeypatch):
    _install(monkeypatch, [FakeResponse(b"", status=204)])
    with pytest.raises(ProtocolError):
        GitHubClient("tok").list_org_repos("acme")


def test_transport_failure_is_network_error(monkeypatch):
    _install(monkeypatch, [urllib.error.URLError("connection refused")])
    with pytest.raises(NetworkError):
        GitHubClient("tok").list_org_repos("acme")


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b'{"message": "oops"}',
        b'[{"name": "r0"}]',
        b'["just-a-string"]',
    ],
)
def test_bad_payload_is_decode_error(monkeypatch, body):
    _install(monkeypatch, [body])
    with pytest.raises(DecodeError):
        GitHubClient("tok").list_org_repos("acme")


def test_expired_deadline_issues_no_request(monkeypatch):
    calls = _install(monkeypatch, [_page(0, 1)])
    deadline = Deadline(None)
    deadline.cancel()
    with pytest.raises(DeadlineExceeded):
        GitHubClient("tok").list_org_repos("acme", deadline=deadline)
    assert calls == []


def test_deadline_firing_between_pages_aborts_listing(monkeypatch):
    deadline = Deadline(None)
    calls = []

    def fake_urlopen(req, timeout=None):
        calls.append(req)
        deadline.cancel()
        return FakeResponse(_page(0, 100))

    monkeypatch.setattr(github_client.urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(DeadlineExceeded):
        GitHubClient("tok").list_org_repos("acme", deadline=deadline)
    assert len(calls) == 1


class TruncatedResponse(FakeResponse):
    def read(self):
        raise http.client.IncompleteRead(b"[{", 512)


def test_truncated_body_is_network_error(monkeypatch):
    _install(monkeypatch, [TruncatedResponse(b"")])
    with pytest.raises(NetworkError):
        GitHubClient("tok").list_org_repos("acme")


def test_remote_disconnect_is_network_error(monkeypatch):
    _install(monkeypatch, [http.client.RemoteDisconnected("Remote end closed connection without response")])
    with pytest.raises(NetworkError):
        GitHubClient("tok").list_org_repos("acme")


@pytest.mark.parametrize(
    "error",
    [socket.timeout("timed out"), urllib.error.URLError(socket.timeout("timed out")), http.client.IncompleteRead(b"")],
)
def test_deadline_firing_mid_request_is_deadline_exceeded(monkeypatch, error):
    deadline = Deadline(None)

    def fake_urlopen(req, timeout=None):
        deadline.cancel()
        raise error

    monkeypatch.setattr(github_client.urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(DeadlineExceeded):
        GitHubClient("tok").list_org_repos("acme", deadline=deadline)


def test_request_timeout_is_clamped_to_deadline(monkeypatch):
    seen = []

    def fake_urlopen(req, timeout=None):
        seen.append(timeout)
        return FakeResponse(_page(0, 1))

    monkeypatch.setattr(github_client.urllib.request, "urlopen", fake_urlopen)
    GitHubClient("tok", timeout=30).list_org_repos("acme", deadline=Deadline(5))
    assert 0 < seen[0] <= 5
