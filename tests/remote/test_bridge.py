from __future__ import annotations

import requests

from production_tracker.remote.bridge import RemoteBridge, resolve_endpoint_url

URL = "https://script.google.com/macros/s/abc/exec"


class FakeResponse:
    def __init__(self, payload=None, *, status=200, bad_json=False):
        self._payload = payload
        self.status_code = status
        self._bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


class FakeSession:
    def __init__(self, response=None, *, error=None):
        self.response = response or FakeResponse([])
        self.error = error
        self.gets: list[tuple] = []
        self.posts: list[tuple] = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.gets.append((url, params, timeout))
        if self.error:
            raise self.error
        return self.response

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        if self.error:
            raise self.error
        return FakeResponse(status=500)

    def close(self):
        self.closed = True


def test_resolve_endpoint_prefers_saved_value_with_prefix():
    assert resolve_endpoint_url(URL, "https://script.google.com/other") == URL
    assert resolve_endpoint_url("", URL) == URL
    assert resolve_endpoint_url("http://example.com", URL) == URL
    assert resolve_endpoint_url(None, "PASTE_YOUR_COPIED_APPS_SCRIPT_URL_HERE") is None
    assert resolve_endpoint_url("http://intranet/x", None, prefix="http://intranet") == "http://intranet/x"


def test_fetch_sends_action_and_cache_busters():
    session = FakeSession(FakeResponse([{"id": "p1"}]))
    bridge = RemoteBridge(lambda: URL, session=session, timeout=3)

    assert bridge.fetch("getProduction") == [{"id": "p1"}]

    url, params, timeout = session.gets[0]
    assert url == URL
    assert params["action"] == "getProduction"
    assert isinstance(params["_t"], int)
    assert len(params["_s"]) == 6
    assert timeout == 3


def test_fetch_returns_none_on_failures():
    for session in (
        FakeSession(error=requests.exceptions.ConnectionError("offline")),
        FakeSession(error=requests.exceptions.Timeout("slow")),
        FakeSession(FakeResponse(status=502)),
        FakeSession(FakeResponse(bad_json=True)),
    ):
        assert RemoteBridge(lambda: URL, session=session).fetch("getUsers") is None


def test_save_posts_envelope_and_ignores_response():
    session = FakeSession()
    bridge = RemoteBridge(lambda: URL, session=session)

    assert bridge.save("saveOffDays", [{"id": "od1"}]) is True

    url, body, _ = session.posts[0]
    assert url == URL
    assert body["action"] == "saveOffDays"
    assert body["data"] == [{"id": "od1"}]
    assert isinstance(body["timestamp"], int)


def test_save_reports_dispatch_failure():
    session = FakeSession(error=requests.exceptions.ConnectionError("offline"))
    assert RemoteBridge(lambda: URL, session=session).save("saveLogs", []) is False


def test_disabled_bridge_does_no_io():
    session = FakeSession()
    bridge = RemoteBridge(lambda: None, session=session)

    assert bridge.is_enabled() is False
    assert bridge.fetch("getLogs") is None
    assert bridge.save("saveLogs", []) is False
    assert session.gets == [] and session.posts == []

    bridge.close()
    assert session.closed is True
