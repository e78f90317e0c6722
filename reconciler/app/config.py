"""
Runtime configuration for the contract field reconciliation engine.

This module centralizes environment-driven settings that shape how raw
template schemas are interpreted: which field types are presentation-only,
which marker identifies an "other" option, and the accepted date window
used when normalizing loosely formatted dates.

Configuration is read-only at runtime. It tunes interpretation only and
must never change the merge or exclusivity rules of the engine.
"""

from __future__ import annotations

import logging
import os
from typing import Tuple

from pydantic import BaseModel, Field, field_validator, ValidationInfo


class ReconcilerConfig(BaseModel):
    """
    Runtime configuration for the reconciliation engine.

    Configuration is environment-driven, immutable, and validated at
    construction so that a misconfigured process fails fast.
    """

    # ------------------------------------------------------------------
    # Schema interpretation
    # ------------------------------------------------------------------

    PRESENTATION_ONLY_TYPES: Tuple[str, ...] = Field(
        ("signature",),
        description=(
            "Lower-cased field type tags dropped by the indexer. "
            "These fields are drawn by the visual surface only."
        ),
    )

    DESCRIPTION_SUFFIX: str = Field(
        "_description",
        description="Name suffix marking a field as a paired description",
    )

    OTHER_OPTION_MARKER: str = Field(
        "other",
        description=(
            "Case-insensitive substring identifying an 'other, please "
            "specify' option in a stored group selection"
        ),
    )

    # ------------------------------------------------------------------
    # Date normalization window
    # ------------------------------------------------------------------

    DATE_MIN_YEAR: int = Field(
        1900,
        description="Earliest year accepted by date normalization",
    )

    DATE_MAX_YEAR: int = Field(
        2100,
        description="Latest year accepted by date normalization",
    )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    LOG_LEVEL: str = Field(
        "WARNING",
        description="Log level applied to the 'reconciler' logger hierarchy",
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("PRESENTATION_ONLY_TYPES")
    @classmethod
    def normalize_presentation_types(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(t.strip().lower() for t in v if t and t.strip())

    @field_validator("DESCRIPTION_SUFFIX", "OTHER_OPTION_MARKER")
    @classmethod
    def non_empty_marker(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Marker values must be non-empty strings.")
        return v

    @field_validator("DATE_MAX_YEAR")
    @classmethod
    def date_window_is_ordered(cls, v: int, info: ValidationInfo) -> int:
        min_year = info.data.get("DATE_MIN_YEAR")
        if min_year is not None and v < min_year:
            raise ValueError(
                f"DATE_MAX_YEAR ({v}) must not be earlier than "
                f"DATE_MIN_YEAR ({min_year})."
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unsupported LOG_LEVEL '{v}'.")
        return level

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "ReconcilerConfig":
        """
        Load configuration from environment variables.

        All values are parsed once at startup and must remain immutable.
        """

        types_env = os.getenv("RECONCILER_PRESENTATION_ONLY_TYPES")

        return cls(
            PRESENTATION_ONLY_TYPES=(
                tuple(types_env.split(","))
                if types_env is not None
                else ("signature",)
            ),
            DESCRIPTION_SUFFIX=os.getenv(
                "RECONCILER_DESCRIPTION_SUFFIX", "_description"
            ),
            OTHER_OPTION_MARKER=os.getenv(
                "RECONCILER_OTHER_OPTION_MARKER", "other"
            ),
            DATE_MIN_YEAR=int(
                os.getenv("RECONCILER_DATE_MIN_YEAR", "1900")
            ),
            DATE_MAX_YEAR=int(
                os.getenv("RECONCILER_DATE_MAX_YEAR", "2100")
            ),
            LOG_LEVEL=os.getenv("RECONCILER_LOG_LEVEL", "WARNING"),
        )

    model_config = {
        "frozen": True,
    }
