"""
Family grouping for the structured form surface.

Field names carry no explicit hierarchy beyond dot-delimited segments.
This module recovers presentation structure from them:

- a family (section key) per field, from its dotted name
- checkbox / ``_description`` pairing
- conditional visibility of "other, please specify" description fields
- ordered, deduplicated render items per family

IMPORTANT:
- Only dots separate hierarchy levels. Underscores never do.
- An option group is rendered once per page render, in the first family
  where any of its members appears, with members from all pages.
- Families are recomputed on every read and are never persisted.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from reconciler.app.config import ReconcilerConfig
from reconciler.app.reconciliation.labels import (
    format_family_label,
    format_option_label,
)
from reconciler.app.reconciliation.radio_codec import RadioGroupResolver
from reconciler.app.schemas.fields import (
    ContractData,
    FieldDescriptor,
    SchemaIndex,
)
from reconciler.app.schemas.render import (
    FamilySection,
    GroupedOptionItem,
    PairedCheckboxItem,
    RenderItem,
    RenderModel,
    SingleFieldItem,
)
from reconciler.app.schemas.template import FieldType

logger = logging.getLogger(__name__)

DESCRIPTION_SUFFIX = "_description"


# ---------------------------------------------------------------------------
# Name-level helpers (pure)
# ---------------------------------------------------------------------------


def get_field_family(
    field_name: str,
    description_suffix: str = DESCRIPTION_SUFFIX,
) -> str:
    """
    Family key of a field: its dot-segments minus the last one, after
    stripping a trailing description suffix.

    >>> get_field_family("purchase.property.included_appliances.refrigerator_description")
    'purchase.property.included_appliances'
    >>> get_field_family("simple_field")
    ''
    """
    normalized = field_name
    if normalized.endswith(description_suffix):
        normalized = normalized[: -len(description_suffix)]

    segments = [s for s in normalized.split(".") if s]
    if len(segments) <= 1:
        return ""
    return ".".join(segments[:-1])


def build_description_map(
    fields: Sequence[FieldDescriptor],
    description_suffix: str = DESCRIPTION_SUFFIX,
) -> Dict[str, FieldDescriptor]:
    """Map parent field name -> its description field."""
    descriptions: Dict[str, FieldDescriptor] = {}
    for field in fields:
        if field.name.endswith(description_suffix):
            descriptions[field.name[: -len(description_suffix)]] = field
    return descriptions


def find_other_description_group(
    field_name: str,
    groups: Mapping[str, object],
    marker: str = "other",
) -> Tuple[bool, Optional[str]]:
    """
    Detect an "other, please specify" description field.

    Returns ``(is_other, group_key)``. A field qualifies when its name
    contains the marker and ends in ``_description`` or ``.description``.
    ``group_key`` is None when no governing group can be located; such a
    field is still an other-description candidate but can never be
    shown.
    """
    lowered = field_name.lower()
    if marker.lower() not in lowered or not (
        lowered.endswith("_description") or lowered.endswith(".description")
    ):
        return False, None

    base = re.sub(r"_description$", "", field_name)
    base = re.sub(r"\.description$", "", base)

    escaped = re.escape(marker)
    candidates = [
        re.sub(rf"\.{escaped}.*$", "_group", base, count=1),
        re.sub(rf"\.{escaped}.*$", ".group", base, count=1),
        re.sub(rf"_{escaped}.*$", "_group", base, count=1),
    ]

    for group_key in candidates:
        if group_key in groups:
            return True, group_key

    return True, None


def _family_sort_key(family_key: str) -> Tuple[bool, str, str]:
    # Empty family (ungrouped fields) sorts last.
    return (family_key == "", family_key.casefold(), family_key)


# ---------------------------------------------------------------------------
# Grouper
# ---------------------------------------------------------------------------


class FamilyGrouper:
    """
    Builds the per-page render model of the structured form surface.
    """

    def __init__(
        self,
        resolver: RadioGroupResolver,
        config: Optional[ReconcilerConfig] = None,
    ) -> None:
        self._resolver = resolver
        self._config = config or ReconcilerConfig()

    def group(
        self,
        index: SchemaIndex,
        contract_data: Optional[ContractData],
        page: int = 1,
    ) -> RenderModel:
        suffix = self._config.DESCRIPTION_SUFFIX
        if not 1 <= page <= index.page_count:
            logger.debug(
                "Page %d outside 1..%d; nothing to render",
                page,
                index.page_count,
            )
            return RenderModel(page=page)

        by_family: Dict[str, List[FieldDescriptor]] = {}
        for field in index.fields_on_page(page):
            by_family.setdefault(
                get_field_family(field.name, suffix), []
            ).append(field)

        rendered_groups: set[str] = set()
        unresolved: List[str] = []
        sections: List[FamilySection] = []

        for family_key in sorted(by_family, key=_family_sort_key):
            fields = by_family[family_key]
            items = self._family_items(
                fields,
                index=index,
                contract_data=contract_data,
                rendered_groups=rendered_groups,
                unresolved=unresolved,
            )
            if items:
                sections.append(
                    FamilySection(
                        family_key=family_key,
                        label=format_family_label(family_key),
                        items=items,
                    )
                )

        return RenderModel(
            page=page,
            sections=sections,
            unresolved_other_fields=unresolved,
        )

    # ------------------------------------------------------------------
    # Per-family classification
    # ------------------------------------------------------------------

    def _family_items(
        self,
        fields: List[FieldDescriptor],
        *,
        index: SchemaIndex,
        contract_data: Optional[ContractData],
        rendered_groups: set[str],
        unresolved: List[str],
    ) -> List[RenderItem]:
        suffix = self._config.DESCRIPTION_SUFFIX
        descriptions = build_description_map(fields, suffix)
        by_name = {field.name: field for field in fields}
        items: List[RenderItem] = []

        for field in fields:
            if field.name.endswith(suffix):
                is_other, group_key = find_other_description_group(
                    field.name,
                    index.groups,
                    self._config.OTHER_OPTION_MARKER,
                )
                if is_other:
                    if group_key is None:
                        unresolved.append(field.name)
                    elif self._resolver.is_other_selected(
                        group_key, contract_data
                    ):
                        items.append(SingleFieldItem(field=field))
                    continue

                parent = by_name.get(field.name[: -len(suffix)])
                if parent is not None and parent.type == FieldType.CHECKBOX:
                    # Rendered together with its checkbox.
                    continue

                items.append(SingleFieldItem(field=field))
                continue

            if field.is_option:
                if field.group in rendered_groups:
                    continue
                rendered_groups.add(field.group)

                members = index.groups.get(field.group) or [field]
                items.append(
                    GroupedOptionItem(
                        group_key=field.group,
                        members=members,
                        option_labels=[
                            format_option_label(m.name, field.group)
                            for m in members
                        ],
                    )
                )
                continue

            description = descriptions.get(field.name)
            if description is not None and field.type == FieldType.CHECKBOX:
                items.append(
                    PairedCheckboxItem(checkbox=field, description=description)
                )
            else:
                items.append(SingleFieldItem(field=field))

        return items
