# slackchat/main.py
import asyncio
import logging
import os
import sys
from typing import List, Optional

from prompt_toolkit.patch_stdout import patch_stdout

from slackchat.client import SlackClient
from slackchat.core.bus import Bus
from slackchat.core.config import Config, apply_to_state, setup_logging
from slackchat.core.history import HistoryLog
from slackchat.core.reducer import apply_event, initial_tasks
from slackchat.core.state import Phase, SessionState
from slackchat.errors import StartupError
from slackchat.transport import TaskGateway
from slackchat.ui_ptk.layout import ChatLayout

USAGE = "Usage: slack-chat <team> <channelID>"


async def bus_listener(state, bus, ui, gateway):
    try:
        async for ev in bus.listen():
            try:
                state, requests = apply_event(state, ev)
            except Exception:
                logging.exception(f"[reducer] error on {type(ev).__name__}")
                continue
            for req in requests:
                if gateway.dispatch(req) is None:
                    ui.apply(req)
            if state.dirty:
                ui.refresh(state)
                state.dirty = False
            ui.invalidate()
            if state.phase is Phase.EXITING:
                bus.close()
                gateway.cancel_all()
                return
    except asyncio.CancelledError:
        return


def prepare_history_dir(cfg: Config) -> None:
    if cfg.history_dir.startswith("~"):
        raise StartupError("cannot determine home directory")
    try:
        os.makedirs(cfg.history_dir, exist_ok=True)
    except OSError as e:
        raise StartupError(f"cannot create history directory {cfg.history_dir}: {e}") from e


def load_config() -> Config:
    try:
        return Config.load()
    except (TypeError, ValueError):
        return Config()


async def main(team: str, channel_id: str, cfg: Optional[Config] = None):
    cfg = cfg or load_config()
    prepare_history_dir(cfg)
    setup_logging(cfg)
    logging.info(f"Starting session for {team}/{channel_id}")

    client = SlackClient.from_config(team, cfg)
    try:
        history = HistoryLog.load(cfg.history_path(team, channel_id))
    except OSError as e:
        raise StartupError(f"cannot read history: {e}") from e

    state = SessionState(channel_id=channel_id, history=history)
    apply_to_state(cfg, state)
    bus = Bus()
    gateway = TaskGateway(client, bus, page_size=cfg.page_size)
    state.channel_name = await gateway.resolve_channel_name(channel_id)

    ui = ChatLayout(state, bus)
    listener_task = asyncio.create_task(bus_listener(state, bus, ui, gateway))
    for req in initial_tasks(state):
        gateway.dispatch(req)

    try:
        with patch_stdout():
            await ui.app.run_async()
    finally:
        bus.close()
        gateway.cancel_all()
        if not listener_task.done():
            listener_task.cancel()
        await asyncio.gather(listener_task, return_exceptions=True)
        logging.info(f"Session ended after {state.ticks} polls")


def run(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) < 2:
        print(USAGE)
        return 1
    try:
        asyncio.run(main(args[0], args[1]))
    except StartupError as e:
        print(f"Error starting session: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logging.exception("Fatal error")
        print(f"Error running program: {e}", file=sys.stderr)
        return 1
    return 0


def cli():
    sys.exit(run())


if __name__ == "__main__":
    cli()
