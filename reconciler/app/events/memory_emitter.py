from __future__ import annotations

import asyncio
from collections import deque
from typing import AsyncIterator, Deque, List, Optional

from reconciler.app.events.models import SyncEvent, SyncEventType
from reconciler.app.events.emitter import SyncEventEmitter

DEFAULT_MAX_EVENTS = 1000


class MemoryQueueEventEmitter(SyncEventEmitter):
    """
    In-memory event emitter.

    Properties:
    - keeps a bounded, ordered history for inspection
    - feeds a bounded single-consumer async stream
    - never blocks the emitting surface

    When nothing drains ``stream()`` the oldest events are dropped, so a
    long editing session holds at most ``max_events`` of each.
    ``max_events=None`` removes both bounds.
    """

    def __init__(self, max_events: Optional[int] = DEFAULT_MAX_EVENTS) -> None:
        if max_events is not None and max_events < 1:
            raise ValueError("max_events must be a positive integer or None.")

        self._max_events = max_events
        self._queue: asyncio.Queue[SyncEvent | None] = asyncio.Queue(
            maxsize=max_events or 0
        )
        self._history: Deque[SyncEvent] = deque(maxlen=max_events)
        self._closed = False

    @property
    def events(self) -> List[SyncEvent]:
        return list(self._history)

    def of_type(self, event_type: SyncEventType) -> List[SyncEvent]:
        return [e for e in self._history if e.event_type == event_type]

    def emit(self, event: SyncEvent) -> None:
        if self._closed:
            return

        self._history.append(event)
        self._put_dropping_oldest(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._put_dropping_oldest(None)

    def _put_dropping_oldest(self, item: Optional[SyncEvent]) -> None:
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(item)

    async def stream(self) -> AsyncIterator[SyncEvent]:
        """
        Async generator yielding emitted events in order until closed.
        """
        while True:
            event = await self._queue.get()
            if event is None:
                break
            yield event
