"""Shared fixtures: message factory and an in-memory Slack client."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from slackchat.core.history import HistoryLog
from slackchat.core.state import Phase, SessionState
from slackchat.errors import SenderLookupError
from slackchat.model import Message


def msg(ts: str, sender: str = "alice", text: str = "hi") -> Message:
    return Message(id=ts, sender_name=sender, text=text)


class FakeClient:
    """Records calls and serves canned Slack payloads."""

    def __init__(self, pages: List[List[Dict[str, Any]]] | None = None):
        self.pages = list(pages or [])
        self.history_calls: List[tuple] = []
        self.sent: List[tuple] = []
        self.fail_history: Exception | None = None
        self.fail_send: Exception | None = None
        self.fail_info: Exception | None = None
        self.names = {"U1": "alice", "U2": "bob"}

    def history(self, channel_id, oldest="", latest="", limit=20):
        self.history_calls.append((channel_id, oldest, latest, limit))
        if self.fail_history:
            raise self.fail_history
        return self.pages.pop(0) if self.pages else []

    def send_message(self, channel_id, text):
        self.sent.append((channel_id, text))
        if self.fail_send:
            raise self.fail_send
        return "1700000100.000100"

    def channel_info(self, channel_id):
        if self.fail_info:
            raise self.fail_info
        return {"id": channel_id, "name": "general"}

    def username_for_message(self, message):
        try:
            return self.names[message["user"]]
        except KeyError:
            raise SenderLookupError(message.get("user"))


@pytest.fixture()
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture()
def ready_state(tmp_path) -> SessionState:
    state = SessionState(channel_id="C1", channel_name="general",
                         history=HistoryLog.load(str(tmp_path / "t-C1.history")))
    state.phase = Phase.READY
    return state
