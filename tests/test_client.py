"""SlackClient request building and error classification."""

from __future__ import annotations

import pytest
import requests

from slackchat.client import SlackClient
from slackchat.core.config import Config
from slackchat.errors import (
    AuthError,
    ChannelNotFoundError,
    RateLimitedError,
    SenderLookupError,
    StartupError,
    TransportError,
)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, headers=None, bad_json=False):
        self.payload = payload
        self.status_code = status_code
        self.headers = headers or {}
        self.bad_json = bad_json

    def json(self):
        if self.bad_json:
            raise ValueError("no json")
        return self.payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.headers = {}
        self.cookies = requests.cookies.RequestsCookieJar()

    def _next(self, verb, url, kwargs):
        self.calls.append((verb, url, kwargs))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)


def _client(*responses, cookie=None):
    session = FakeSession(*responses)
    return SlackClient("acme", "xoxb-test", cookie=cookie, session=session), session


def test_history_omits_empty_cursor_and_sends_token():
    client, session = _client(FakeResponse({"ok": True, "messages": [{"ts": "1.0"}]}))

    assert client.history("C1", "", "", 20) == [{"ts": "1.0"}]

    verb, url, kwargs = session.calls[0]
    assert (verb, url) == ("GET", "https://slack.com/api/conversations.history")
    assert kwargs["params"] == {"channel": "C1", "limit": 20}
    assert session.headers["Authorization"] == "Bearer xoxb-test"


def test_history_passes_oldest_when_polling():
    client, session = _client(FakeResponse({"ok": True, "messages": []}))
    client.history("C1", "1700000000.000100", "", 20)
    assert session.calls[0][2]["params"]["oldest"] == "1700000000.000100"


def test_send_posts_form_and_returns_ts():
    client, session = _client(FakeResponse({"ok": True, "ts": "1700000001.000200"}))

    assert client.send_message("C1", "hi there") == "1700000001.000200"
    verb, url, kwargs = session.calls[0]
    assert verb == "POST" and url.endswith("chat.postMessage")
    assert kwargs["data"] == {"channel": "C1", "text": "hi there"}


def test_cookie_is_attached():
    _, session = _client(cookie="xoxd-abc")
    assert session.cookies.get("d", domain=".slack.com") == "xoxd-abc"


@pytest.mark.parametrize("resp,exc", [
    (FakeResponse({"ok": False, "error": "invalid_auth"}), AuthError),
    (FakeResponse({"ok": False, "error": "channel_not_found"}), ChannelNotFoundError),
    (FakeResponse({"ok": False, "error": "ratelimited"}), RateLimitedError),
    (FakeResponse({"ok": False, "error": "fatal_error"}), TransportError),
    (FakeResponse(status_code=429, headers={"Retry-After": "3"}), RateLimitedError),
    (FakeResponse(status_code=401), AuthError),
    (FakeResponse(status_code=503), TransportError),
    (FakeResponse(bad_json=True), TransportError),
    (requests.ConnectionError("boom"), TransportError),
])
def test_failures_are_classified(resp, exc):
    client, _ = _client(resp)
    with pytest.raises(exc):
        client.history("C1")


def test_rate_limit_names_retry_delay():
    client, _ = _client(FakeResponse(status_code=429, headers={"Retry-After": "3"}))
    with pytest.raises(RateLimitedError, match="retry after 3s"):
        client.send_message("C1", "x")


def test_username_lookup_is_cached():
    client, session = _client(FakeResponse({"ok": True, "user": {
        "name": "jdoe", "profile": {"display_name": "", "real_name": "Jane Doe"}}}))

    assert client.username_for_message({"user": "U1"}) == "Jane Doe"
    assert client.username_for_message({"user": "U1"}) == "Jane Doe"
    assert len(session.calls) == 1


def test_username_falls_back_to_message_fields():
    client, session = _client()
    assert client.username_for_message({"username": "deploy-bot"}) == "deploy-bot"
    assert client.username_for_message({"bot_profile": {"name": "CI"}}) == "CI"
    assert session.calls == []


def test_username_failures_are_lookup_errors():
    client, _ = _client(FakeResponse({"ok": False, "error": "user_not_found"}))
    with pytest.raises(SenderLookupError):
        client.username_for_message({"user": "U9"})
    with pytest.raises(SenderLookupError):
        client.username_for_message({"ts": "1.0"})


def test_from_config_requires_credentials(monkeypatch):
    monkeypatch.delenv("SLACK_TOKEN", raising=False)
    with pytest.raises(StartupError):
        SlackClient.from_config("acme", Config())

    monkeypatch.setenv("SLACK_TOKEN", "xoxb-env")
    client = SlackClient.from_config("acme", Config())
    assert client.session.headers["Authorization"] == "Bearer xoxb-env"


def test_channel_info_without_channel_is_transport_error():
    client, _ = _client(FakeResponse({"ok": True}))
    with pytest.raises(TransportError):
        client.channel_info("C1")


def test_user_info_without_user_is_lookup_error():
    client, _ = _client(FakeResponse({"ok": True}))
    with pytest.raises(SenderLookupError):
        client.username_for_message({"user": "U1"})
