# slackchat/ui_ptk/views.py
from dataclasses import dataclass
from typing import List, Tuple

from prompt_toolkit.formatted_text import StyleAndTextTuples

from slackchat.model import Message
from slackchat.ui_ptk.text_sanitize import sanitize_text

PLACEHOLDER = "Initializing..."
TIME_FORMAT = "%H:%M:%S"

MODE_PLACEHOLDER = "placeholder"
MODE_ERROR = "error"
MODE_CHAT = "chat"


@dataclass(frozen=True)
class LogLine:
    time: str
    sender: str
    body: str

    def __str__(self) -> str:
        return f"{self.time} {self.sender}: {self.body}"


@dataclass(frozen=True)
class Frame:
    mode: str
    notice: str = ""
    header: str = ""
    lines: Tuple[LogLine, ...] = ()
    indicator: str = ""

    def line_count(self) -> int:
        return sum(1 + line.body.count("\n") for line in self.lines)


def format_message(m: Message) -> LogLine:
    return LogLine(
        time=m.timestamp.strftime(TIME_FORMAT),
        sender=sanitize_text(m.sender_name),
        body=sanitize_text(m.text),
    )


def render(state) -> Frame:
    """Project session state onto what the screen shows. Never mutates."""
    if not state.ready:
        return Frame(mode=MODE_PLACEHOLDER, notice=PLACEHOLDER)
    if state.error is not None:
        return Frame(mode=MODE_ERROR, notice=f"Error: {state.error}\nPress Ctrl+C to quit.")

    indicator = ""
    if state.history.browsing:
        index, total = state.history.position()
        indicator = f" [History: {index}/{total}]"
    return Frame(
        mode=MODE_CHAT,
        header=f"#{state.channel_name}",
        lines=tuple(format_message(m) for m in state.store),
        indicator=indicator,
    )


def log_fragments(frame: Frame) -> StyleAndTextTuples:
    out: List[Tuple[str, str]] = []
    for i, line in enumerate(frame.lines):
        if i:
            out.append(("", "\n"))
        out.append(("class:time", line.time))
        out.append(("", " "))
        out.append(("class:username", line.sender))
        out.append(("", ": "))
        out.append(("class:message", line.body))
    return out
