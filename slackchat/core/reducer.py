# slackchat/core/reducer.py
import logging
from typing import List, Tuple

from slackchat.core import events
from slackchat.core.state import Phase, SessionState, Stage
from slackchat.core.tasks import ArmTimer, ExitApp, FetchMessages, SendMessage, SetInput, TaskRequest
from slackchat.errors import ChatServiceError, HistoryWriteError


def initial_tasks(state: SessionState) -> List[TaskRequest]:
    return [
        FetchMessages(state.channel_id, cursor=state.store.sync_cursor),
        ArmTimer(state.poll_interval),
    ]


def apply_event(state: SessionState, ev) -> Tuple[SessionState, List[TaskRequest]]:
    """Apply one event and return the state plus the work it asks for.

    This is the only place session state changes. It does no network I/O
    and schedules nothing itself; the caller dispatches the returned
    requests. The only side effect outside ``state`` is the history file
    append on submit.
    """
    if state.phase is Phase.EXITING:
        return state, []

    if isinstance(ev, events.Quit):
        state.phase = Phase.EXITING
        logging.info("Quit requested")
        return state, [ExitApp()]
    elif isinstance(ev, events.Resize):
        state.width, state.height = ev.width, ev.height
        if state.phase is Phase.INITIALIZING:
            state.phase = Phase.READY
            logging.info(f"Layout ready at {ev.width}x{ev.height}")
        state.dirty = True
        return state, []
    elif isinstance(ev, events.Tick):
        state.ticks += 1
        return state, [
            ArmTimer(state.poll_interval),
            FetchMessages(state.channel_id, cursor=state.store.sync_cursor),
        ]
    elif isinstance(ev, events.MessagesResult):
        return state, _on_messages(state, ev)
    elif isinstance(ev, events.SendResult):
        return state, _on_send(state, ev)
    elif isinstance(ev, events.InputChanged):
        state.input_text = ev.text
        return state, []

    if not state.ready:
        return state, []

    if isinstance(ev, events.Submit):
        return state, _on_submit(state, ev.text)
    elif isinstance(ev, (events.RecallPrevious, events.RecallNext)):
        direction = -1 if isinstance(ev, events.RecallPrevious) else 1
        text = state.history.navigate(direction, state.input_text)
        state.dirty = True
        if text == state.input_text:
            return state, []
        state.input_text = text
        return state, [SetInput(text)]
    elif isinstance(ev, events.Redraw):
        state.dirty = True
    return state, []


def _on_submit(state: SessionState, text: str) -> List[TaskRequest]:
    if not text.strip():
        return []
    try:
        state.history.submit(text)
    except HistoryWriteError as e:
        logging.error(f"{e}")
        _set_error(state, e)
    state.history.reset_cursor()

    p = state.open_pipeline(text)
    state.input_text = ""
    state.dirty = True
    logging.debug(f"Pipeline {p.id}: sending {len(text)} chars")
    return [SendMessage(state.channel_id, p.text, p.id), SetInput("")]


def _on_messages(state: SessionState, ev: events.MessagesResult) -> List[TaskRequest]:
    if ev.pipeline_id is not None:
        p = state.pipelines.pop(ev.pipeline_id, None)
        if p is not None:
            p.advance()

    if ev.error is not None:
        logging.warning(f"Fetch failed: {ev.error!r}")
        _set_error(state, ev.error)
        return []

    _clear_remote_error(state)
    if ev.messages and state.store.merge(ev.messages):
        state.store.advance_cursor(ev.messages)
        state.dirty = True
    return []


def _on_send(state: SessionState, ev: events.SendResult) -> List[TaskRequest]:
    p = state.pipelines.get(ev.pipeline_id)
    if p is None or p.stage is not Stage.SEND:
        logging.warning(f"Send result for unknown pipeline {ev.pipeline_id}")
        return []
    p.advance()

    if ev.error is not None:
        logging.warning(f"Send of {len(p.text)} chars failed: {ev.error!r}")
        _set_error(state, ev.error)
    else:
        logging.debug(f"Pipeline {p.id}: delivered as {ev.confirmation_id}")
        _clear_remote_error(state)

    # the refresh happens even after a failed send
    return [FetchMessages(state.channel_id, cursor="", delay=state.settle_delay, pipeline_id=p.id)]


def _set_error(state: SessionState, err: Exception) -> None:
    state.error = err
    state.dirty = True


def _clear_remote_error(state: SessionState) -> None:
    if isinstance(state.error, ChatServiceError):
        state.error = None
        state.dirty = True
