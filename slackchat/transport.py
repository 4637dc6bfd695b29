# slackchat/transport.py
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional, Set

from slackchat.core import events
from slackchat.core.tasks import ArmTimer, FetchMessages, SendMessage
from slackchat.errors import ChatServiceError, SenderLookupError, TransportError
from slackchat.model import UNKNOWN_SENDER, Message, message_from_payload

PAGE_SIZE = 20
WORKERS = 4


class TaskGateway:
    """Runs remote calls and timers as asyncio tasks.

    Each dispatched request ends in exactly one event on the bus. The
    gateway keeps no session state; it only tracks live task handles so
    they can be abandoned on quit.

    Blocking calls run on the gateway's own thread pool, which
    ``cancel_all`` shuts down without waiting. A call already blocked in
    HTTP finishes in the background within the client's request timeout.
    """

    def __init__(self, client: Any, bus, page_size: int = PAGE_SIZE):
        self.client = client
        self.bus = bus
        self.page_size = page_size
        self._tasks: Set[asyncio.Task] = set()
        self._executor = ThreadPoolExecutor(max_workers=WORKERS, thread_name_prefix="slack-io")

    async def _run_blocking(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, lambda: fn(*args))

    def _resolve_sender(self, raw) -> str:
        try:
            return self.client.username_for_message(raw)
        except SenderLookupError as e:
            logging.debug(f"Sender lookup failed: {e}")
            return UNKNOWN_SENDER

    def _fetch_blocking(self, channel_id: str, cursor: str) -> List[Message]:
        raw = self.client.history(channel_id, cursor, "", self.page_size)
        return [message_from_payload(m, self._resolve_sender(m)) for m in raw]

    async def fetch_since(self, channel_id: str, cursor: str = "",
                          pipeline_id: Optional[int] = None) -> events.MessagesResult:
        try:
            msgs = await self._run_blocking(self._fetch_blocking, channel_id, cursor)
        except ChatServiceError as e:
            return events.MessagesResult(error=e, pipeline_id=pipeline_id)
        except Exception as e:
            logging.exception("Unexpected fetch failure")
            return events.MessagesResult(error=TransportError(repr(e)), pipeline_id=pipeline_id)
        logging.debug(f"Fetched {len(msgs)} messages since {cursor or 'latest'}")
        return events.MessagesResult(messages=tuple(msgs), pipeline_id=pipeline_id)

    async def send(self, channel_id: str, text: str, pipeline_id: int) -> events.SendResult:
        try:
            ts = await self._run_blocking(self.client.send_message, channel_id, text)
        except ChatServiceError as e:
            return events.SendResult(pipeline_id=pipeline_id, error=e)
        except Exception as e:
            logging.exception("Unexpected send failure")
            return events.SendResult(pipeline_id=pipeline_id, error=TransportError(repr(e)))
        return events.SendResult(pipeline_id=pipeline_id, confirmation_id=ts)

    async def resolve_channel_name(self, channel_id: str) -> str:
        try:
            info = await self._run_blocking(self.client.channel_info, channel_id)
        except ChatServiceError as e:
            logging.warning(f"Channel lookup failed, using id: {e}")
            return channel_id
        return info.get("name") or channel_id

    # ---------- dispatch ----------
    async def _fetch_task(self, req: FetchMessages):
        if req.delay:
            await asyncio.sleep(req.delay)
        await self.bus.emit(await self.fetch_since(req.channel_id, req.cursor, req.pipeline_id))

    async def _send_task(self, req: SendMessage):
        await self.bus.emit(await self.send(req.channel_id, req.text, req.pipeline_id))

    async def _timer_task(self, req: ArmTimer):
        await asyncio.sleep(req.delay)
        loop = asyncio.get_running_loop()
        await self.bus.emit(events.Tick(ts=loop.time()))

    def dispatch(self, req) -> Optional[asyncio.Task]:
        if isinstance(req, FetchMessages):
            coro = self._fetch_task(req)
        elif isinstance(req, SendMessage):
            coro = self._send_task(req)
        elif isinstance(req, ArmTimer):
            coro = self._timer_task(req)
        else:
            return None
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def pending(self) -> int:
        return len(self._tasks)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)
