from .models import SyncEvent, SyncEventType
from .emitter import SyncEventEmitter, NullEventEmitter
from .memory_emitter import MemoryQueueEventEmitter

__all__ = [
    "SyncEvent",
    "SyncEventType",
    "SyncEventEmitter",
    "NullEventEmitter",
    "MemoryQueueEventEmitter",
]
