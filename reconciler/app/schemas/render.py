"""
Render model for the structured form surface.

A page renders as an ordered list of family sections. Each section holds
render items of three kinds: a single field, an option group rendered
once with all of its members, or a checkbox paired with its
``_description`` sibling.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from reconciler.app.schemas.fields import FieldDescriptor


class SingleFieldItem(BaseModel):
    kind: Literal["field"] = "field"
    field: FieldDescriptor

    model_config = ConfigDict(frozen=True)


class GroupedOptionItem(BaseModel):
    """
    An option group rendered as one control.

    ``members`` spans every page of the template, not only the page
    being rendered.
    """

    kind: Literal["grouped_option"] = "grouped_option"
    group_key: str
    members: List[FieldDescriptor]
    option_labels: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class PairedCheckboxItem(BaseModel):
    kind: Literal["paired_checkbox"] = "paired_checkbox"
    checkbox: FieldDescriptor
    description: FieldDescriptor

    model_config = ConfigDict(frozen=True)


RenderItem = Annotated[
    Union[SingleFieldItem, GroupedOptionItem, PairedCheckboxItem],
    Field(discriminator="kind"),
]


class FamilySection(BaseModel):
    family_key: str
    label: str
    items: List[RenderItem] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def field_names(self) -> List[str]:
        """Every field name rendered by this section, in render order."""
        names: List[str] = []
        for item in self.items:
            if isinstance(item, SingleFieldItem):
                names.append(item.field.name)
            elif isinstance(item, GroupedOptionItem):
                names.extend(member.name for member in item.members)
            else:
                names.extend([item.checkbox.name, item.description.name])
        return names


class RenderModel(BaseModel):
    """
    Render output for one page.

    ``unresolved_other_fields`` lists "other" description fields whose
    governing option group could not be located. They are never shown;
    reporting them is left to the caller.
    """

    page: int
    sections: List[FamilySection] = Field(default_factory=list)
    unresolved_other_fields: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
