# slackchat/ui_ptk/layout.py
from prompt_toolkit.application import Application
from prompt_toolkit.data_structures import Point
from prompt_toolkit.filters import Condition
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.containers import ConditionalContainer
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.layout.processors import BeforeInput, ConditionalProcessor
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import Frame, Label, TextArea

from slackchat.core import events
from slackchat.core.tasks import ExitApp, SetInput
from slackchat.ui_ptk.bind import build_keybindings
from slackchat.ui_ptk.views import MODE_CHAT, MODE_ERROR, log_fragments, render

MAX_INPUT_CHARS = 4000
INPUT_PLACEHOLDER = "Send a message..."

STYLE = Style.from_dict({
    "header": "bg:#5f5fd7 #ffffd7",
    "time": "#626262",
    "username": "ansimagenta bold",
    "message": "",
    "error": "ansired",
    "prompt": "#5f5fd7",
    "indicator": "#626262",
    "placeholder": "#626262 italic",
    "frame.border": "#5f5fff",
})


class LogScroll:
    """Lines scrolled up from the bottom of the message log. 0 follows new messages."""

    def __init__(self, page_size: int = 10):
        self.offset = 0
        self.page_size = page_size
        self.total = 0

    def page(self, direction: int) -> None:
        self.offset = max(0, min(max(0, self.total - 1), self.offset + direction * self.page_size))

    def to_end(self) -> None:
        self.offset = 0

    def cursor(self) -> Point:
        return Point(x=0, y=max(0, self.total - 1 - self.offset))


class ChatLayout:
    """prompt_toolkit front end: shows the last rendered frame, turns keys and resizes into events."""

    def __init__(self, state, bus):
        self.bus = bus
        self.frame = render(state)
        self.scroll = LogScroll()
        self._size = None

        self.input_box = TextArea(
            height=1, prompt=[("class:prompt", "➤ ")], multiline=False, wrap_lines=False,
            input_processors=[ConditionalProcessor(
                BeforeInput([("class:placeholder", INPUT_PLACEHOLDER)]),
                filter=Condition(lambda: not self.input_box.text),
            )],
        )
        self.input_box.buffer.on_text_changed += self._on_input_changed
        kb = build_keybindings(bus, self.input_box, self.scroll)

        header = Label(text=lambda: [("class:header", f" {self.frame.header} ")])
        self.log_window = Window(
            content=FormattedTextControl(lambda: log_fragments(self.frame),
                                         get_cursor_position=self.scroll.cursor),
            wrap_lines=True,
            always_hide_cursor=True,
            height=Dimension(weight=1),
        )
        indicator = Window(content=FormattedTextControl(lambda: [("class:indicator", self.frame.indicator)]),
                           height=1, always_hide_cursor=True)
        notice = Window(content=FormattedTextControl(
            lambda: [("class:error" if self.frame.mode == MODE_ERROR else "", self.frame.notice)]),
            always_hide_cursor=True)

        chat = HSplit([
            header,
            Window(height=1, char=" "),
            self.log_window,
            Frame(self.input_box, style="class:frame"),
            indicator,
        ])
        root = HSplit([
            ConditionalContainer(chat, filter=Condition(lambda: self.frame.mode == MODE_CHAT)),
            ConditionalContainer(notice, filter=Condition(lambda: self.frame.mode != MODE_CHAT)),
        ])

        self.app = Application(
            layout=Layout(root, focused_element=self.input_box),
            key_bindings=kb,
            full_screen=True,
            style=STYLE,
        )
        self.app.before_render += self._before_render

    def _before_render(self, app) -> None:
        size = app.output.get_size()
        if size != self._size:
            self._size = size
            self.bus.post(events.Resize(width=size.columns, height=size.rows))

    def refresh(self, state) -> None:
        self.frame = render(state)
        self.scroll.total = self.frame.line_count()
        self.scroll.page_size = max(1, state.height - 6)
        self.scroll.to_end()

    def apply(self, req) -> None:
        if isinstance(req, SetInput):
            self._set_input(req.text)
        elif isinstance(req, ExitApp):
            if self.app.is_running:
                self.app.exit()

    def _on_input_changed(self, buffer) -> None:
        if len(buffer.text) > MAX_INPUT_CHARS:
            # assigning fires this handler again with the capped text
            buffer.text = buffer.text[:MAX_INPUT_CHARS]
            return
        self.bus.post(events.InputChanged(buffer.text))

    def _set_input(self, text: str) -> None:
        self.input_box.text = text
        self.input_box.buffer.cursor_position = len(text)

    def invalidate(self) -> None:
        self.app.invalidate()
