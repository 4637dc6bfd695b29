# slackchat/core/state.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from slackchat.core.history import HistoryLog
from slackchat.core.store import MessageStore

POLL_INTERVAL = 2.0
SETTLE_DELAY = 0.5


class Phase(Enum):
    INITIALIZING = "INITIALIZING"
    READY = "READY"
    EXITING = "EXITING"


class Stage(Enum):
    SEND = "SEND"          # waiting for the send result
    REFRESH = "REFRESH"    # settle delay + most-recent fetch in flight
    DONE = "DONE"


@dataclass
class SendPipeline:
    """One submission: send, then a delayed most-recent refresh."""
    id: int
    text: str
    stage: Stage = Stage.SEND

    def advance(self) -> Stage:
        if self.stage is Stage.SEND:
            self.stage = Stage.REFRESH
        elif self.stage is Stage.REFRESH:
            self.stage = Stage.DONE
        return self.stage


@dataclass
class SessionState:
    channel_id: str
    channel_name: str = ""
    store: MessageStore = field(default_factory=MessageStore)
    history: HistoryLog = field(default_factory=HistoryLog)
    input_text: str = ""
    error: Optional[Exception] = None
    phase: Phase = Phase.INITIALIZING
    width: int = 0
    height: int = 0
    dirty: bool = False
    ticks: int = 0
    pipelines: Dict[int, SendPipeline] = field(default_factory=dict)
    next_pipeline_id: int = 1
    poll_interval: float = POLL_INTERVAL
    settle_delay: float = SETTLE_DELAY

    def __post_init__(self):
        if not self.channel_name:
            self.channel_name = self.channel_id

    @property
    def ready(self) -> bool:
        return self.phase is not Phase.INITIALIZING

    @property
    def browsing(self) -> bool:
        return self.history.browsing

    def open_pipeline(self, text: str) -> SendPipeline:
        p = SendPipeline(id=self.next_pipeline_id, text=text)
        self.next_pipeline_id += 1
        self.pipelines[p.id] = p
        return p
