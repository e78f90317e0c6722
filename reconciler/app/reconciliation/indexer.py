"""
Schema indexing.

Flattens a multi-page template into one ordered list of field
descriptors and builds the option-group index. Groups are collected
across all pages so that options laid out on different pages still form
one logical group.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from reconciler.app.config import ReconcilerConfig
from reconciler.app.schemas.fields import FieldDescriptor, SchemaIndex
from reconciler.app.schemas.template import (
    FieldDefinition,
    FieldType,
    TemplateSchema,
)

logger = logging.getLogger(__name__)


class SchemaIndexer:
    """
    Deterministic template flattener.

    Guarantees:
    - page order and within-page order are preserved
    - presentation-only fields (signatures) are dropped
    - a missing or empty template yields empty collections
    - the first occurrence wins when a name is repeated
    """

    def __init__(self, config: Optional[ReconcilerConfig] = None) -> None:
        self._config = config or ReconcilerConfig()

    def index(self, template: Any) -> SchemaIndex:
        schema = TemplateSchema.from_raw(template)

        fields: List[FieldDescriptor] = []
        groups: Dict[str, List[FieldDescriptor]] = {}
        presentation_fields: List[str] = []
        seen: set[str] = set()

        for page, definitions in schema.iter_pages():
            for definition in definitions:
                if self._is_presentation_only(definition):
                    presentation_fields.append(definition.name)
                    continue

                if definition.name in seen:
                    logger.debug(
                        "Duplicate field name %r on page %d ignored",
                        definition.name,
                        page,
                    )
                    continue
                seen.add(definition.name)

                descriptor = self._describe(definition, page)
                fields.append(descriptor)

                if descriptor.is_option:
                    groups.setdefault(descriptor.group, []).append(descriptor)

        return SchemaIndex(
            fields=fields,
            groups=groups,
            presentation_fields=presentation_fields,
            page_count=schema.page_count,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_presentation_only(self, definition: FieldDefinition) -> bool:
        if definition.field_type == FieldType.SIGNATURE:
            return True
        return definition.raw_type in self._config.PRESENTATION_ONLY_TYPES

    @staticmethod
    def _describe(definition: FieldDefinition, page: int) -> FieldDescriptor:
        return FieldDescriptor(
            name=definition.name,
            type=definition.field_type,
            raw_type=definition.raw_type,
            group=definition.group,
            required=definition.is_required,
            page=page,
            position_y=definition.position_y,
            description=definition.description,
            group_description=definition.group_description,
            content=definition.content,
            options=definition.options,
        )
