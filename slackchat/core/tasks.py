# slackchat/core/tasks.py
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class FetchMessages:
    channel_id: str
    cursor: str = ""
    delay: float = 0.0
    pipeline_id: Optional[int] = None

@dataclass(frozen=True)
class SendMessage:
    channel_id: str
    text: str
    pipeline_id: int

@dataclass(frozen=True)
class ArmTimer:
    delay: float

# UI-side requests, carried out by the terminal adapter rather than the gateway
@dataclass(frozen=True)
class SetInput:
    text: str

@dataclass(frozen=True)
class ExitApp:
    pass

TaskRequest = Union[FetchMessages, SendMessage, ArmTimer, SetInput, ExitApp]
