# slackchat/core/events.py
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from slackchat.model import Message


@dataclass(frozen=True)
class Resize:
    width: int
    height: int

@dataclass(frozen=True)
class Quit:
    pass

@dataclass(frozen=True)
class Submit:
    text: str

@dataclass(frozen=True)
class InputChanged:
    text: str

@dataclass(frozen=True)
class RecallPrevious:
    pass

@dataclass(frozen=True)
class RecallNext:
    pass

@dataclass(frozen=True)
class Tick:
    ts: float

@dataclass(frozen=True)
class MessagesResult:
    messages: Tuple[Message, ...] = ()
    error: Optional[Exception] = None
    pipeline_id: Optional[int] = None  # set when this is a post-send refresh

@dataclass(frozen=True)
class SendResult:
    pipeline_id: int
    error: Optional[Exception] = None
    confirmation_id: Optional[str] = None

@dataclass(frozen=True)
class Redraw:
    pass

Event = Union[Resize, Quit, Submit, InputChanged, RecallPrevious, RecallNext, Tick, MessagesResult, SendResult, Redraw]
