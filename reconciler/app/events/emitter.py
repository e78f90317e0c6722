from __future__ import annotations

from typing import Protocol

from reconciler.app.events.models import SyncEvent


class SyncEventEmitter(Protocol):
    """
    Interface for broadcasting sync observations.

    Implementations must be:
    - synchronous and non-blocking (emission happens inside UI event
      handlers)
    - fail-safe (emission failures must not break an edit)
    - observational only
    """

    def emit(self, event: SyncEvent) -> None:
        ...


class NullEventEmitter:
    """
    A safe no-op emitter.

    Used when nothing observes the sync protocol, and in tests that do
    not care about events.
    """

    def emit(self, event: SyncEvent) -> None:
        return
