"""
Field update engine.

Every edit, from either editing surface, is turned into a sparse patch
here and nowhere else. Identical input therefore yields an identical
patch regardless of which surface produced it, and the two surfaces can
never disagree about which option of a group is selected.

Patches are merged shallowly into the canonical record
(``{**record, **patch}``), never applied as a full replacement.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from reconciler.app.reconciliation.unfilled import is_field_empty
from reconciler.app.schemas.fields import ContractData, SchemaIndex

logger = logging.getLogger(__name__)

Patch = Dict[str, str]


def merge_patch(record: Optional[ContractData], patch: Mapping[str, Any]) -> ContractData:
    """Shallow-merge a patch into a record, returning a new record."""
    return {**(record or {}), **patch}


def _normalize_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return value if isinstance(value, str) else str(value)


class FieldUpdateEngine:
    """
    Computes minimal patches for single-field edits.

    Rules, in priority order:

    1. Option groups. Selecting an option (any non-empty value on an
       option field) writes only the group key, set to that option's
       name. Writing a member name directly to the group key does the
       same. Sibling options are never written: their surface values
       are derived from the group key.
    2. Cleared values (``None`` or ``""``) empty the key.
    3. Everything else passes through as ``{field_name: value}``.
    """

    def __init__(self, index: SchemaIndex) -> None:
        self._index = index
        self._options = {
            field.name: field.group
            for field in index.fields
            if field.is_option
        }

    def compute_update(
        self,
        field_name: str,
        new_value: Any,
        current: Optional[ContractData] = None,
    ) -> Patch:
        """
        Patch for one edit.

        ``current`` is the canonical record as last seen by the caller.
        It is consulted only when an option is deselected: the group is
        cleared when that option is the stored selection (or when no
        record is supplied), and left alone otherwise.
        """
        value = _normalize_value(new_value)

        if self._index.is_group_key(field_name):
            return self._group_key_update(field_name, value)

        group_key = self._options.get(field_name)
        if group_key is not None:
            return self._option_update(field_name, group_key, value, current)

        if value is None:
            return {field_name: ""}
        return {field_name: value}

    def compute_updates(
        self,
        updates: Mapping[str, Any],
        current: Optional[ContractData] = None,
    ) -> Patch:
        """Fold several edits, in order, into one patch."""
        patch: Patch = {}
        running = dict(current) if current is not None else None
        for field_name, value in updates.items():
            step = self.compute_update(field_name, value, running)
            patch.update(step)
            if running is not None:
                running.update(step)
        return patch

    # ------------------------------------------------------------------
    # Option groups
    # ------------------------------------------------------------------

    def _group_key_update(self, group_key: str, value: Optional[str]) -> Patch:
        if not value:
            return {group_key: ""}

        if value not in self._index.group_member_names(group_key):
            logger.debug(
                "Ignoring selection %r for group %r: not a member",
                value,
                group_key,
            )
            return {}

        return {group_key: value}

    @staticmethod
    def _option_update(
        option_name: str,
        group_key: str,
        value: Optional[str],
        current: Optional[ContractData],
    ) -> Patch:
        if not is_field_empty(value):
            return {group_key: option_name}

        if current is None or current.get(group_key) == option_name:
            return {group_key: ""}

        # Deselecting an option that is not selected changes nothing.
        return {}
