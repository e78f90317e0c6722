"""
Sequential cursor over the unfilled-field list.

The list shrinks and grows as fields are filled and cleared. The cursor
follows entries by name: after every refresh it points at the same
named entry if that entry still exists, otherwise its index is clamped
into range. An empty list makes the navigator inactive.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence

from reconciler.app.schemas.fields import UnfilledFieldEntry


class NavigatorState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class FieldNavigator:
    def __init__(self, entries: Sequence[UnfilledFieldEntry] = ()) -> None:
        self._entries: List[UnfilledFieldEntry] = []
        self._index = 0
        self._current_name: Optional[str] = None
        self.sync(entries)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> NavigatorState:
        return NavigatorState.ACTIVE if self._entries else NavigatorState.INACTIVE

    @property
    def is_active(self) -> bool:
        return self.state == NavigatorState.ACTIVE

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def total_remaining(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[UnfilledFieldEntry]:
        return list(self._entries)

    def current(self) -> Optional[UnfilledFieldEntry]:
        if not self._entries:
            return None
        return self._entries[self._index]

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def sync(self, entries: Sequence[UnfilledFieldEntry]) -> None:
        """Adopt a recomputed unfilled list."""
        self._entries = list(entries)

        if not self._entries:
            self._index = 0
            self._current_name = None
            return

        if self._current_name is not None:
            for idx, entry in enumerate(self._entries):
                if entry.name == self._current_name:
                    self._set_index(idx)
                    return

        # Current entry was filled (or this is the first list): clamp.
        self._set_index(min(self._index, len(self._entries) - 1))

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def go_next(self) -> Optional[UnfilledFieldEntry]:
        if self._entries:
            self._set_index((self._index + 1) % len(self._entries))
        return self.current()

    def go_prev(self) -> Optional[UnfilledFieldEntry]:
        if self._entries:
            self._set_index((self._index - 1) % len(self._entries))
        return self.current()

    def go_to_field(self, name: str) -> Optional[UnfilledFieldEntry]:
        for idx, entry in enumerate(self._entries):
            if entry.name == name:
                self._set_index(idx)
                break
        return self.current()

    def _set_index(self, idx: int) -> None:
        self._index = idx
        self._current_name = self._entries[idx].name
