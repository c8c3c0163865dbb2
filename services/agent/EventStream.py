import asyncio
import json
from typing import AsyncIterator

_CLOSE = object()


class EventStream:
    """Line-delimited server-sent events fed by the agent loop.

    The producer calls emit() and finally close(); the HTTP response iterates
    frames(). Once closed, or once the consumer went away, further emits are
    silently discarded. The queue is unbounded; events are small.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._detached = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def detached(self) -> bool:
        return self._detached

    def emit(self, event: dict) -> bool:
        """Queue one event. Returns False if it was discarded."""
        if self._closed or self._detached:
            return False
        self._queue.put_nowait(event)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSE)

    def detach(self) -> None:
        """Mark the consumer as gone; the producer keeps running and its events are dropped."""
        self._detached = True

    async def events(self) -> AsyncIterator[dict]:
        while True:
            event = await self._queue.get()
            if event is _CLOSE:
                return
            yield event

    async def frames(self) -> AsyncIterator[str]:
        """Yield "data: <json>\\n\\n" frames until the producer closes the stream."""
        try:
            async for event in self.events():
                yield f"data: {json.dumps(event)}\n\n"
        finally:
            if not self._closed:
                self.detach()
