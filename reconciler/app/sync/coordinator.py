"""
Canonical record ownership and cross-surface mirroring.

The coordinator is the only writer of the canonical contract record.
Surfaces hand it sparse patches; it merges each one shallowly exactly
once and mirrors the merged record to every attached surface. Surfaces
decide for themselves (via their state machine) whether a mirrored
record is pushed into their widgets.

It MUST NOT:
- compute patches (that belongs to the shared update engine)
- replace the record wholesale on behalf of a surface
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional
from uuid import uuid4

from reconciler.app.events import (
    NullEventEmitter,
    SyncEvent,
    SyncEventEmitter,
    SyncEventType,
)
from reconciler.app.reconciliation.update_engine import merge_patch
from reconciler.app.schemas.fields import ContractData
from reconciler.app.sync.channel import GroupSelectionChannel
from reconciler.app.sync.surface import EditingSurface

logger = logging.getLogger(__name__)


class ContractSyncCoordinator:
    def __init__(
        self,
        initial: Optional[ContractData] = None,
        *,
        session_id: Optional[str] = None,
        emitter: Optional[SyncEventEmitter] = None,
    ) -> None:
        self.session_id = session_id or uuid4().hex
        self._record: ContractData = dict(initial or {})
        self._surfaces: Dict[str, EditingSurface] = {}
        self._emitter = emitter or NullEventEmitter()
        self._merge_count = 0
        self.channel = GroupSelectionChannel()

    # ------------------------------------------------------------------
    # Record
    # ------------------------------------------------------------------

    @property
    def record(self) -> ContractData:
        """A copy of the canonical record."""
        return dict(self._record)

    @property
    def merge_count(self) -> int:
        return self._merge_count

    # ------------------------------------------------------------------
    # Surfaces
    # ------------------------------------------------------------------

    def attach(self, surface: EditingSurface) -> None:
        """
        Attach a surface and push the current record into it.
        """
        self._surfaces[surface.surface_id] = surface
        surface.bind(self, self.session_id)
        self._emit(SyncEventType.SURFACE_ATTACHED, surface.surface_id)
        surface.receive_external(self.record)

    def detach(self, surface_id: str) -> None:
        """
        Detach a surface on unmount. Derived structures held for it are
        discarded; the canonical record is untouched.
        """
        surface = self._surfaces.pop(surface_id, None)
        if surface is None:
            return
        surface.bind(None)
        if not self._surfaces:
            self.channel.clear()
        self._emit(SyncEventType.SURFACE_DETACHED, surface_id)

    @property
    def surfaces(self) -> List[EditingSurface]:
        return list(self._surfaces.values())

    # ------------------------------------------------------------------
    # Merge protocol
    # ------------------------------------------------------------------

    def submit(self, source_id: str, patch: Mapping[str, str]) -> ContractData:
        """
        Merge one patch and mirror the result to every surface.

        An empty patch changes nothing and is not mirrored.
        """
        if not patch:
            logger.debug("Empty patch from %r ignored", source_id)
            return self.record

        self._record = merge_patch(self._record, patch)
        self._merge_count += 1
        self._emit(
            SyncEventType.PATCH_MERGED,
            source_id,
            {"patch": dict(patch)},
        )

        snapshot = self.record
        for surface in list(self._surfaces.values()):
            surface.receive_external(snapshot)

        return snapshot

    def load(self, record: ContractData) -> None:
        """
        Replace the record with freshly loaded data (initial fetch or
        reload). Never used for edits.
        """
        self._record = dict(record)
        snapshot = self.record
        for surface in list(self._surfaces.values()):
            surface.receive_external(snapshot)

    def _emit(
        self,
        event_type: SyncEventType,
        surface_id: Optional[str],
        details: Optional[dict] = None,
    ) -> None:
        try:
            self._emitter.emit(
                SyncEvent(
                    session_id=self.session_id,
                    event_type=event_type,
                    surface_id=surface_id,
                    details=details,
                )
            )
        except Exception as exc:
            logger.warning("Sync event emission failed: %s", exc)
