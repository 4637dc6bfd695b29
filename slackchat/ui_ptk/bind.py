# slackchat/ui_ptk/bind.py
from prompt_toolkit.key_binding import KeyBindings

from slackchat.core import events


def build_keybindings(bus, input_box, log_scroll):
    """Keys become bus events; anything unbound falls through to the input."""
    kb = KeyBindings()

    @kb.add("escape", eager=True)
    @kb.add("c-c")
    def _(event):
        bus.post(events.Quit())

    @kb.add("enter")
    def _(event):
        text = input_box.text
        if not text.strip():
            return
        bus.post(events.Submit(text))

    @kb.add("up")
    def _(event):
        bus.post(events.RecallPrevious())

    @kb.add("down")
    def _(event):
        bus.post(events.RecallNext())

    @kb.add("pageup")
    def _(event):
        log_scroll.page(+1)
        event.app.invalidate()

    @kb.add("pagedown")
    def _(event):
        log_scroll.page(-1)
        event.app.invalidate()

    @kb.add("c-l")
    def _(event):
        bus.post(events.Redraw())

    return kb
