"""
Cross-surface synchronization.

Keeps two simultaneously mounted editing surfaces consistent with one
canonical contract record without feedback loops.
"""

from .channel import GroupSelectionChannel
from .surface import EditingSurface, SurfaceState, WidgetSink, defer_to_event_loop
from .coordinator import ContractSyncCoordinator

__all__ = [
    "GroupSelectionChannel",
    "EditingSurface",
    "SurfaceState",
    "WidgetSink",
    "defer_to_event_loop",
    "ContractSyncCoordinator",
]
