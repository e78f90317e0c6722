from __future__ import annotations

from typing import Any, Dict, Optional
from enum import Enum
from datetime import datetime, timezone
from uuid import uuid4, UUID

from pydantic import BaseModel, Field, ConfigDict


# ----------------------------------------------------------------------
# Event Types (Finite)
# ----------------------------------------------------------------------
class SyncEventType(str, Enum):
    """
    Observations emitted while edits flow between editing surfaces and
    the canonical contract record.
    """

    # ------------------------------------------------------------------
    # Local edits
    # ------------------------------------------------------------------
    PATCH_EMITTED = "patch_emitted"

    # ------------------------------------------------------------------
    # Canonical record
    # ------------------------------------------------------------------
    PATCH_MERGED = "patch_merged"

    # ------------------------------------------------------------------
    # Mirroring
    # ------------------------------------------------------------------
    EXTERNAL_UPDATE_APPLIED = "external_update_applied"
    ECHO_SUPPRESSED = "echo_suppressed"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    SURFACE_ATTACHED = "surface_attached"
    SURFACE_DETACHED = "surface_detached"


# ----------------------------------------------------------------------
# Event Model
# ----------------------------------------------------------------------
class SyncEvent(BaseModel):
    """
    An immutable observation of one step of the merge protocol.

    Events are:
    - strictly observational
    - transport-agnostic
    - never consulted for control flow
    """

    event_id: UUID = Field(default_factory=uuid4)
    session_id: str = Field(..., description="Editing session identifier")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_type: SyncEventType
    surface_id: Optional[str] = None

    # Optional contextual metadata (field name, patch keys, reason...)
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
