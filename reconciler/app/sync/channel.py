"""
Group-scoped selection channel.

When an option is selected on the visual surface, its sibling widgets
must redraw as deselected. The channel carries that signal. It is owned
by one editing session and keyed by group key, so a publish reaches only
the subscribers of that group in that session. Templates mounted side
by side never see each other's selections.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

# (group_key, selected_option_name)
GroupSelectionListener = Callable[[str, str], None]


class GroupSelectionChannel:
    def __init__(self) -> None:
        self._listeners: Dict[str, List[GroupSelectionListener]] = {}

    def subscribe(
        self,
        group_key: str,
        listener: GroupSelectionListener,
    ) -> Callable[[], None]:
        """
        Register a listener for one group. Returns the unsubscribe
        callable; widget adapters call it when they unmount.
        """
        self._listeners.setdefault(group_key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(group_key, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(group_key, None)

        return unsubscribe

    def publish(self, group_key: str, selected_option: str) -> int:
        """
        Notify the group's listeners of a new selection. Returns the
        number of listeners notified.
        """
        listeners = list(self._listeners.get(group_key, []))
        for listener in listeners:
            listener(group_key, selected_option)

        logger.debug(
            "Group %r selection %r delivered to %d listener(s)",
            group_key,
            selected_option,
            len(listeners),
        )
        return len(listeners)

    def subscriber_count(self, group_key: str) -> int:
        return len(self._listeners.get(group_key, []))

    def clear(self) -> None:
        self._listeners.clear()
