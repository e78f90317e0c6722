"""
Raw template schema input.

A template arrives as ``{"basePdf": <opaque>, "schemas": [page, ...]}``
where each page is either a list of field definitions or a mapping of
field name -> field definition. Templates are frequently partial
(saved mid-edit), so parsing here is lenient: anything that cannot be
understood as a named field is skipped rather than rejected.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field types
# ---------------------------------------------------------------------------


class FieldType(str, Enum):
    """
    Normalized field type tag.

    Raw tags are matched case-insensitively. ``radioGroup`` is the tag
    stored by existing templates and is treated as an alias of
    ``radioGroupOption``.
    """

    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO_GROUP_OPTION = "radioGroupOption"
    DATE = "date"
    DATE_TIME = "dateTime"
    SIGNATURE = "signature"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> "FieldType":
        if raw is None or str(raw).strip() == "":
            return cls.TEXT
        return _RAW_TYPE_ALIASES.get(str(raw).strip().lower(), cls.OTHER)


_RAW_TYPE_ALIASES: Dict[str, FieldType] = {
    "text": FieldType.TEXT,
    "checkbox": FieldType.CHECKBOX,
    "radiogroupoption": FieldType.RADIO_GROUP_OPTION,
    "radiogroup": FieldType.RADIO_GROUP_OPTION,
    "date": FieldType.DATE,
    "datetime": FieldType.DATE_TIME,
    "signature": FieldType.SIGNATURE,
}


# ---------------------------------------------------------------------------
# Raw field definitions
# ---------------------------------------------------------------------------


def _coerce_text(value: Any) -> Optional[str]:
    """Strings pass, numbers are stringified, anything else is dropped."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _coerce_coordinate(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class FieldPosition(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("x", "y", mode="before")
    @classmethod
    def unreadable_coordinate_is_none(cls, v: Any) -> Optional[float]:
        return _coerce_coordinate(v)


class FieldDefinition(BaseModel):
    """
    One raw field definition as stored in a template page.

    Unknown keys (fonts, widths, colors...) belong to the rendering
    widget and are ignored. Known optional keys holding a value of the
    wrong shape are coerced or dropped; only a missing or unusable
    ``name`` rejects the field.
    """

    name: str = Field(..., min_length=1)
    type: Optional[str] = None
    group: Optional[str] = None
    required: Any = None
    position: Optional[FieldPosition] = None
    description: Optional[str] = None
    group_description: Optional[str] = Field(None, alias="groupDescription")
    content: Optional[str] = None
    options: Optional[Union[str, List[Any]]] = None

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("name", mode="before")
    @classmethod
    def numeric_name_is_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator(
        "type", "description", "group_description", "content", mode="before"
    )
    @classmethod
    def lenient_text(cls, v: Any) -> Optional[str]:
        return _coerce_text(v)

    @field_validator("group", mode="before")
    @classmethod
    def blank_group_is_none(cls, v: Any) -> Optional[str]:
        text = _coerce_text(v)
        if text is None or not text.strip():
            return None
        return text

    @field_validator("position", mode="before")
    @classmethod
    def unreadable_position_is_none(cls, v: Any) -> Any:
        if isinstance(v, (dict, FieldPosition)):
            return v
        return None

    @field_validator("options", mode="before")
    @classmethod
    def unreadable_options_are_none(cls, v: Any) -> Any:
        if isinstance(v, (str, list)):
            return v
        return None

    @property
    def field_type(self) -> FieldType:
        return FieldType.from_raw(self.type)

    @property
    def raw_type(self) -> str:
        return (self.type or "").strip().lower()

    @property
    def is_required(self) -> bool:
        return is_required_flag(self.required)

    @property
    def position_y(self) -> Optional[float]:
        return self.position.y if self.position is not None else None


def is_required_flag(required: Any) -> bool:
    """
    Interpret the loosely typed ``required`` flag of a raw field.

    Accepts ``True``, ``"true"``/``"True"``/``"TRUE"``, ``1`` and ``"1"``.
    """
    if required is True:
        return True
    if isinstance(required, bool):
        return False
    if required in ("true", "True", "TRUE", "1"):
        return True
    return isinstance(required, int) and required == 1


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------


class TemplateSchema(BaseModel):
    """
    A template as consumed by the engine.

    ``base_pdf`` is opaque to this package and is carried only so that a
    template can round-trip to the rendering widget unchanged.
    """

    base_pdf: Any = Field(None, alias="basePdf")
    pages: List[List[FieldDefinition]] = Field(default_factory=list)

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
    )

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def iter_pages(self) -> Iterator[tuple[int, List[FieldDefinition]]]:
        """Yield ``(page_number, fields)`` with 1-based page numbers."""
        for page_idx, fields in enumerate(self.pages):
            yield page_idx + 1, fields

    @classmethod
    def from_raw(cls, raw: Any) -> "TemplateSchema":
        """
        Build a template from raw JSON-like input.

        Never raises for malformed input. A missing or non-list
        ``schemas`` key yields a template with zero pages; a page that is
        neither a list nor a mapping yields an empty page so that page
        numbering stays aligned with the source.
        """
        if isinstance(raw, TemplateSchema):
            return raw

        if not isinstance(raw, dict):
            return cls()

        raw_pages = raw.get("schemas")
        if not isinstance(raw_pages, list):
            return cls(basePdf=raw.get("basePdf"))

        pages = [_parse_page(page) for page in raw_pages]
        return cls(basePdf=raw.get("basePdf"), pages=pages)


def _parse_page(raw_page: Any) -> List[FieldDefinition]:
    if isinstance(raw_page, dict):
        entries = []
        for key, value in raw_page.items():
            if isinstance(value, dict) and not value.get("name"):
                value = {**value, "name": key}
            entries.append(value)
    elif isinstance(raw_page, list):
        entries = raw_page
    else:
        return []

    fields: List[FieldDefinition] = []
    for entry in entries:
        if isinstance(entry, FieldDefinition):
            fields.append(entry)
            continue
        if not isinstance(entry, dict):
            continue
        try:
            fields.append(FieldDefinition.model_validate(entry))
        except ValidationError as exc:
            logger.debug(
                "Skipping unparseable field definition %r: %s",
                entry.get("name"),
                exc.error_count(),
            )
    return fields
