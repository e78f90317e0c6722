"""
Option-group codec.

Two encodings of a "choose one of N" field must stay convertible:

- storage form: ``contract_data[group_key] = "<selected option name>"``,
  absent or empty when nothing is selected
- surface form: every option field carries its own value, which reads
  as selected only for the option whose name equals the stored value

The codec is pure and total. Because every option's surface value is
derived from the single group key, no input can ever select more than
one option of a group.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from reconciler.app.config import ReconcilerConfig
from reconciler.app.schemas.fields import ContractData, SchemaIndex


def to_widget_value(value: Any) -> str:
    """Stringify a contract value the way the rendering widget expects."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


class RadioGroupResolver:
    """
    Converts option-group selections between storage and surface form.
    """

    def __init__(
        self,
        index: SchemaIndex,
        config: Optional[ReconcilerConfig] = None,
    ) -> None:
        self._index = index
        self._marker = (config or ReconcilerConfig()).OTHER_OPTION_MARKER.lower()

    # ------------------------------------------------------------------
    # Single-option codec
    # ------------------------------------------------------------------

    @staticmethod
    def stored_selection(
        group_key: str,
        contract_data: Optional[ContractData],
    ) -> str:
        value = (contract_data or {}).get(group_key)
        if value is None:
            return ""
        return str(value)

    def to_surface_form(
        self,
        group_key: str,
        option_name: str,
        contract_data: Optional[ContractData],
    ) -> str:
        """
        Surface value for one option: the option's own name when it is
        the stored selection, otherwise ``""``.
        """
        selected = self.stored_selection(group_key, contract_data)
        if selected and option_name == selected:
            return selected
        return ""

    def selected_option(
        self,
        group_key: str,
        contract_data: Optional[ContractData],
    ) -> Optional[str]:
        """The selected member name, or None if nothing valid is stored."""
        selected = self.stored_selection(group_key, contract_data)
        if selected in self._index.group_member_names(group_key):
            return selected
        return None

    def is_other_selected(
        self,
        group_key: str,
        contract_data: Optional[ContractData],
    ) -> bool:
        """
        True iff the stored selection contains the "other" marker,
        case-insensitively.

        NOTE:
        This is a substring heuristic on the stored option name, not a
        structural flag. An option named e.g. ``brothers_realty`` also
        matches.
        """
        selected = self.stored_selection(group_key, contract_data)
        return self._marker in selected.lower()

    # ------------------------------------------------------------------
    # Whole-template projection
    # ------------------------------------------------------------------

    def to_widget_inputs(
        self,
        contract_data: Optional[ContractData],
    ) -> Dict[str, str]:
        """
        Project contract data onto per-field widget values.

        Option fields always receive a value (``""`` when deselected).
        Other fields are included only when contract data holds a value
        for them. Presentation-only fields (signatures) pass through
        untouched so the visual surface can still draw them.
        """
        data = contract_data or {}
        inputs: Dict[str, str] = {}

        for field in self._index.fields:
            if field.is_option:
                inputs[field.name] = self.to_surface_form(
                    field.group, field.name, data
                )
                continue

            value = data.get(field.name)
            if value is None:
                continue
            inputs[field.name] = to_widget_value(value)

        for name in self._index.presentation_fields:
            value = data.get(name)
            if value is not None:
                inputs[name] = to_widget_value(value)

        return inputs

    def to_widget_pages(
        self,
        contract_data: Optional[ContractData],
    ) -> List[Dict[str, str]]:
        """
        The same merged input map repeated once per page, so every field
        is available whichever page the widget is showing.
        """
        inputs = self.to_widget_inputs(contract_data)
        return [dict(inputs) for _ in range(self._index.page_count)]
