"""
Required-field completion tracking.

Computes the ordered list of required fields that still lack a value.
Each option group collapses into one synthetic entry keyed by the group
key, and the list is ordered by page, then by vertical position.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from reconciler.app.config import ReconcilerConfig
from reconciler.app.reconciliation.labels import format_field_label
from reconciler.app.schemas.fields import (
    ContractData,
    SchemaIndex,
    UnfilledFieldEntry,
    UnfilledFieldsResult,
)
from reconciler.app.schemas.template import FieldType

logger = logging.getLogger(__name__)

_FALSE_LITERALS = frozenset({"false", "False", "FALSE"})


def is_field_empty(value: Any) -> bool:
    """
    Canonical emptiness predicate.

    Empty: ``None``, ``False``, blank strings and the literals
    ``"false"``/``"False"``/``"FALSE"``. Any other non-blank string,
    including ``"0"``, is filled.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return stripped == "" or stripped in _FALSE_LITERALS
    return False


class UnfilledFieldTracker:
    def __init__(self, config: Optional[ReconcilerConfig] = None) -> None:
        self._config = config or ReconcilerConfig()

    def required_entries(self, index: SchemaIndex) -> List[UnfilledFieldEntry]:
        """
        Every required entry in navigation order, filled or not.
        """
        entries: List[UnfilledFieldEntry] = []
        seen_groups: set[str] = set()

        for field in index.fields:
            if not field.required:
                continue

            if (
                field.type == FieldType.SIGNATURE
                or field.raw_type in self._config.PRESENTATION_ONLY_TYPES
                or field.name.endswith(self._config.DESCRIPTION_SUFFIX)
            ):
                continue

            if field.is_option:
                if field.group in seen_groups:
                    continue
                seen_groups.add(field.group)
                entries.append(
                    UnfilledFieldEntry(
                        name=field.group,
                        label=format_field_label(
                            field.group_description or field.group
                        ),
                        page=field.page,
                        position_y=field.position_y,
                        type=FieldType.RADIO_GROUP_OPTION,
                        group=field.group,
                    )
                )
            else:
                entries.append(
                    UnfilledFieldEntry(
                        name=field.name,
                        label=format_field_label(field.name),
                        page=field.page,
                        position_y=field.position_y,
                        type=field.type,
                    )
                )

        # Stable sort: ties keep schema order.
        entries.sort(key=lambda e: (e.page, e.position_y or 0))
        return entries

    def compute(
        self,
        index: SchemaIndex,
        contract_data: Optional[ContractData],
    ) -> UnfilledFieldsResult:
        data = contract_data or {}
        required = self.required_entries(index)
        unfilled = [e for e in required if is_field_empty(data.get(e.name))]

        logger.debug(
            "Required fields filled: %d / %d",
            len(required) - len(unfilled),
            len(required),
        )

        return UnfilledFieldsResult(
            unfilled_fields=unfilled,
            total_required=len(required),
        )

    def compute_from_required_keys(
        self,
        required_keys: Iterable[str],
        values: Optional[ContractData],
    ) -> UnfilledFieldsResult:
        """
        Track completion from a bare list of required keys and a flat
        value map, for callers that have no template at hand.
        """
        data = values or {}
        required = [
            UnfilledFieldEntry(
                name=key,
                label=format_field_label(key),
                page=1,
                type=FieldType.TEXT,
            )
            for key in required_keys
        ]
        unfilled = [e for e in required if is_field_empty(data.get(e.name))]
        return UnfilledFieldsResult(
            unfilled_fields=unfilled,
            total_required=len(required),
        )
