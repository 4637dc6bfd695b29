# slackchat/core/bus.py
import asyncio
from typing import Any, AsyncGenerator

class Bus:
    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    async def emit(self, event: Any):
        if not self._closed:
            await self._queue.put(event)

    def post(self, event: Any):
        # for key handlers, which cannot await
        if not self._closed:
            self._queue.put_nowait(event)

    def close(self):
        self._closed = True

    async def listen(self) -> AsyncGenerator[Any, None]:
        while not self._closed:
            ev = await self._queue.get()
            yield ev
