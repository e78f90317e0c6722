"""
Derived field structures.

Everything in this module is recomputed from the template and the
current contract data on every evaluation. None of it is persisted and
none of it carries identity beyond the field ``name``, which is the only
join key between these structures and the editing surfaces.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from reconciler.app.schemas.template import FieldType


# Contract data is a flat mapping of field name or group key -> scalar.
ContractData = Dict[str, Any]


# ---------------------------------------------------------------------------
# Field descriptor
# ---------------------------------------------------------------------------


class FieldDescriptor(BaseModel):
    """
    One schema field, flattened and tagged with its page number.

    ``name`` is unique across all pages of a template.
    """

    name: str
    type: FieldType
    raw_type: str = Field(
        "",
        description="Lower-cased type tag as found in the template",
    )
    group: Optional[str] = None
    required: bool = False
    page: int = Field(..., ge=1)
    position_y: Optional[float] = None
    description: Optional[str] = None
    group_description: Optional[str] = None
    content: Optional[str] = None
    options: Optional[Union[str, List[Any]]] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_option(self) -> bool:
        """True when this field is a member of an option group."""
        return self.type == FieldType.RADIO_GROUP_OPTION and bool(self.group)


# ---------------------------------------------------------------------------
# Schema index
# ---------------------------------------------------------------------------


class SchemaIndex(BaseModel):
    """
    Output of the schema indexer.

    ``fields`` preserves page order and within-page order. ``groups``
    maps each group key to its member descriptors, merged across pages.
    """

    fields: List[FieldDescriptor] = Field(default_factory=list)
    groups: Dict[str, List[FieldDescriptor]] = Field(default_factory=dict)
    presentation_fields: List[str] = Field(
        default_factory=list,
        description="Names of dropped presentation-only fields (signatures)",
    )
    page_count: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)

    def get(self, name: str) -> Optional[FieldDescriptor]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def is_group_key(self, key: str) -> bool:
        return key in self.groups

    def group_member_names(self, group_key: str) -> List[str]:
        return [member.name for member in self.groups.get(group_key, [])]

    def fields_by_page(self) -> Dict[int, List[FieldDescriptor]]:
        pages: Dict[int, List[FieldDescriptor]] = {}
        for field in self.fields:
            pages.setdefault(field.page, []).append(field)
        return pages

    def fields_on_page(self, page: int) -> List[FieldDescriptor]:
        return [field for field in self.fields if field.page == page]


# ---------------------------------------------------------------------------
# Unfilled field tracking
# ---------------------------------------------------------------------------


class UnfilledFieldEntry(BaseModel):
    """
    A required field (or a whole option group) awaiting a value.

    For option groups ``name`` and ``group`` are both the group key.
    """

    name: str
    label: str
    page: int
    position_y: Optional[float] = None
    type: FieldType
    group: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class UnfilledFieldsResult(BaseModel):
    unfilled_fields: List[UnfilledFieldEntry] = Field(default_factory=list)
    total_required: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def filled_count(self) -> int:
        return self.total_required - len(self.unfilled_fields)

    @property
    def unfilled_names(self) -> List[str]:
        return [entry.name for entry in self.unfilled_fields]
