"""
Human-readable labels derived from dotted field names.

Labels are reproduced exactly across the form surface and tests, so the
rules here are literal:

- dots separate hierarchy levels
- underscores and camelCase boundaries separate words only
- a field label is built from the full last dot-segment, never from its
  last underscore token (``included_addenda_flags`` -> "Included Addenda
  Flags", not "Flags")
"""

from __future__ import annotations

import re
from typing import List

_CAMEL_BOUNDARY_RE = re.compile(r"([a-z])([A-Z])")
_WORD_START_RE = re.compile(r"\b\w")
_OPTION_SEGMENT_RE = re.compile(r"[._]")
_UNDERSCORE_GROUP_RE = re.compile(r"_group$")
_DOT_GROUP_RE = re.compile(r"\.group$")


def _title_words(text: str) -> str:
    text = _CAMEL_BOUNDARY_RE.sub(r"\1 \2", text)
    text = text.replace("_", " ").lower()
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), text)


def format_field_label(field_name: str) -> str:
    """
    Label a field from its last dot-segment.

    >>> format_field_label("purchase.parties.buyer_names")
    'Buyer Names'
    >>> format_field_label("purchase.buyerNames_test")
    'Buyer Names Test'
    """
    segments = [s for s in field_name.split(".") if s]
    last = segments[-1] if segments else field_name
    return _title_words(last)


def format_family_label(family_key: str) -> str:
    """
    Section heading for a family key.

    >>> format_family_label("purchase.property.included_appliances")
    'Purchase Property Included Appliances'
    """
    if not family_key:
        return ""
    return _title_words(family_key.replace(".", " "))


def format_option_label(option_name: str, group_key: str) -> str:
    """
    Label one option of a group by what it adds to the group's base path.

    Option names are built by appending an option-specific suffix to the
    group's base path (the group key minus its ``_group``/``.group``
    suffix), with no guaranteed separator. Segments of the option name
    that continue to match the base, left to right, are consumed; the
    rest form the label. When every segment matches, the last two or
    three segments are used instead.

    >>> format_option_label(
    ...     "purchase.financing.type_cash", "purchase.financing.type_group"
    ... )
    'Cash'
    """
    group_base = _DOT_GROUP_RE.sub("", _UNDERSCORE_GROUP_RE.sub("", group_key))
    remaining_base = _OPTION_SEGMENT_RE.sub("", group_base.lower())

    segments = [s for s in _OPTION_SEGMENT_RE.split(option_name) if s]

    meaningful: List[str] = []
    matched = 0
    for segment in segments:
        lowered = segment.lower()
        if remaining_base[matched:].startswith(lowered):
            matched += len(lowered)
        else:
            meaningful.append(segment)

    if meaningful:
        return _title_words(" ".join(meaningful))

    tail = min(3, max(2, len(segments)))
    return _title_words(" ".join(segments[-tail:]))
