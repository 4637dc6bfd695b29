# slackchat/model.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

UNKNOWN_SENDER = "unknown"


def ts_to_datetime(ts: str) -> datetime:
    """Slack ids are "<seconds>.<micro>" strings; anything else sorts first."""
    try:
        return datetime.fromtimestamp(float(ts))
    except (TypeError, ValueError, OverflowError, OSError):
        return datetime.fromtimestamp(0)


@dataclass(frozen=True)
class Message:
    id: str
    sender_name: str
    text: str
    timestamp: datetime = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "timestamp", ts_to_datetime(self.id))


def message_from_payload(raw: Dict[str, Any], sender_name: str) -> Message:
    # files/attachments are ignored, only the body text is kept
    return Message(id=str(raw.get("ts", "")), sender_name=sender_name, text=raw.get("text") or "")
