"""
Editing surfaces and the echo suppression protocol.

Two surfaces (the visual canvas and the structured form) stay mounted
together and edit the same canonical record. Each surface is an explicit
state machine:

    IDLE -> EMITTING_LOCAL    -> IDLE   (an edit originated here)
    IDLE -> APPLYING_EXTERNAL -> IDLE   (mirroring someone else's edit)

IMPORTANT:
- The return to IDLE happens on a deferred tick, never synchronously.
  A widget may read its value back right after a write; resetting early
  bounces the edit forever.
- While EMITTING_LOCAL, the surface does not push the mirrored record
  back into its own widgets.
- While APPLYING_EXTERNAL, widget change events are ignored and no patch
  is emitted.
- Group selections are published on the channel after the patch is
  merged, on a deferred tick.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, Optional, Protocol, TYPE_CHECKING

from reconciler.app.errors import SurfaceStateError
from reconciler.app.events import (
    NullEventEmitter,
    SyncEvent,
    SyncEventEmitter,
    SyncEventType,
)
from reconciler.app.reconciliation.unfilled import is_field_empty
from reconciler.app.reconciliation.update_engine import FieldUpdateEngine, Patch
from reconciler.app.schemas.fields import ContractData
from reconciler.app.sync.channel import GroupSelectionChannel

if TYPE_CHECKING:
    from reconciler.app.sync.coordinator import ContractSyncCoordinator

logger = logging.getLogger(__name__)

Deferrer = Callable[[Callable[[], None]], None]
Projection = Callable[[ContractData], Dict[str, str]]


def defer_to_event_loop(callback: Callable[[], None]) -> None:
    """Run ``callback`` on the next tick of the running asyncio loop."""
    asyncio.get_running_loop().call_soon(callback)


class SurfaceState(str, Enum):
    IDLE = "idle"
    EMITTING_LOCAL = "emitting_local"
    APPLYING_EXTERNAL = "applying_external"


_ALLOWED_TRANSITIONS = {
    SurfaceState.IDLE: {
        SurfaceState.EMITTING_LOCAL,
        SurfaceState.APPLYING_EXTERNAL,
    },
    # Re-entry: several keystrokes, or several mirrored records, may land
    # within one tick.
    SurfaceState.EMITTING_LOCAL: {
        SurfaceState.EMITTING_LOCAL,
        SurfaceState.IDLE,
    },
    SurfaceState.APPLYING_EXTERNAL: {
        SurfaceState.APPLYING_EXTERNAL,
        SurfaceState.IDLE,
    },
}


class WidgetSink(Protocol):
    """The widget toolkit side of a surface (out of scope here)."""

    def set_inputs(self, values: Dict[str, str]) -> None:
        ...


class EditingSurface:
    """
    One editing surface bound to the shared update engine.

    ``project`` turns the canonical record into the values this
    surface's widgets display (e.g. per-option surface form for the
    canvas). ``sink`` receives them.
    """

    def __init__(
        self,
        surface_id: str,
        *,
        updater: FieldUpdateEngine,
        project: Projection,
        sink: WidgetSink,
        defer: Optional[Deferrer] = None,
        channel: Optional[GroupSelectionChannel] = None,
        emitter: Optional[SyncEventEmitter] = None,
    ) -> None:
        self.surface_id = surface_id
        self._updater = updater
        self._project = project
        self._sink = sink
        self._defer = defer or defer_to_event_loop
        self._channel = channel
        self._emitter = emitter or NullEventEmitter()

        self._state = SurfaceState.IDLE
        self._phase_token = 0
        self._coordinator: Optional["ContractSyncCoordinator"] = None
        self._session_id = ""
        self._last_record: ContractData = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def last_record(self) -> ContractData:
        return dict(self._last_record)

    @property
    def is_attached(self) -> bool:
        return self._coordinator is not None

    def bind(
        self,
        coordinator: Optional["ContractSyncCoordinator"],
        session_id: str = "",
    ) -> None:
        self._coordinator = coordinator
        self._session_id = session_id

    # ------------------------------------------------------------------
    # Outbound: widget edit -> canonical record
    # ------------------------------------------------------------------

    def handle_local_change(self, field_name: str, value: object) -> Optional[Patch]:
        """
        Entry point for a widget change event.

        Returns the emitted patch, or None when the event was an echo of
        an external update and was suppressed.
        """
        if self._state == SurfaceState.APPLYING_EXTERNAL:
            self._emit(
                SyncEventType.ECHO_SUPPRESSED,
                {"field_name": field_name, "reason": "applying_external"},
            )
            return None

        if self._coordinator is None:
            raise SurfaceStateError(
                f"Surface '{self.surface_id}' is not attached to a coordinator."
            )

        self._enter(SurfaceState.EMITTING_LOCAL)

        patch = self._updater.compute_update(
            field_name, value, current=self._last_record
        )

        self._emit(
            SyncEventType.PATCH_EMITTED,
            {"field_name": field_name, "patch_keys": sorted(patch)},
        )

        self._coordinator.submit(self.surface_id, patch)

        # Published after the merge, on a later tick: a sibling clearing
        # itself must already see the new selection.
        if self._channel is not None and not is_field_empty(value):
            group_key = self._selected_group(field_name, patch)
            if group_key is not None:
                channel = self._channel
                self._defer(lambda: channel.publish(group_key, field_name))

        return patch

    # ------------------------------------------------------------------
    # Inbound: canonical record -> widgets
    # ------------------------------------------------------------------

    def receive_external(self, record: ContractData) -> bool:
        """
        Mirror the canonical record into this surface's widgets.

        Returns True when widget values were pushed, False when the push
        was skipped because this surface originated the update.
        """
        self._last_record = dict(record)

        if self._state == SurfaceState.EMITTING_LOCAL:
            self._emit(
                SyncEventType.ECHO_SUPPRESSED,
                {"reason": "origin_surface"},
            )
            return False

        self._enter(SurfaceState.APPLYING_EXTERNAL)
        self._sink.set_inputs(self._project(self._last_record))
        self._emit(SyncEventType.EXTERNAL_UPDATE_APPLIED)
        return True

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _enter(self, target: SurfaceState) -> None:
        if target not in _ALLOWED_TRANSITIONS[self._state]:
            raise SurfaceStateError(
                f"Illegal transition {self._state.value} -> {target.value} "
                f"on surface '{self.surface_id}'."
            )

        self._state = target
        self._phase_token += 1
        token = self._phase_token
        self._defer(lambda: self._settle(token))

    def _settle(self, token: int) -> None:
        # Only the most recent phase entry may end the phase.
        if token != self._phase_token:
            return
        self._state = SurfaceState.IDLE

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _selected_group(field_name: str, patch: Patch) -> Optional[str]:
        for key, value in patch.items():
            if key != field_name and value == field_name:
                return key
        return None

    def _emit(self, event_type: SyncEventType, details: Optional[dict] = None) -> None:
        try:
            self._emitter.emit(
                SyncEvent(
                    session_id=self._session_id,
                    event_type=event_type,
                    surface_id=self.surface_id,
                    details=details,
                )
            )
        except Exception as exc:
            logger.warning("Sync event emission failed: %s", exc)
