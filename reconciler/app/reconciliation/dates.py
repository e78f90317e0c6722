"""
Date normalization for the structured form surface.

Date inputs strictly require ``yyyy-mm-dd``, while stored values arrive
in whatever shape extraction produced (``2026/02/15``, ``02/15/2026``,
``January 15, 2026``, ISO timestamps...). Unparseable, ambiguous or
out-of-window values normalize to ``""``.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional

from reconciler.app.config import ReconcilerConfig

_HTML_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NUMERIC_DATE_RE = re.compile(r"^(\d{1,4})[-/](\d{1,2})[-/](\d{1,4})$")

_TEXTUAL_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def to_html_date_value(
    raw: Any,
    config: Optional[ReconcilerConfig] = None,
) -> str:
    if not isinstance(raw, str):
        return ""

    trimmed = raw.strip()
    if not trimmed:
        return ""

    if _HTML_DATE_RE.match(trimmed):
        return trimmed

    cfg = config or ReconcilerConfig()

    parsed = _parse_iso(trimmed) or _parse_textual(trimmed)
    if parsed is not None:
        return _format(parsed, cfg)

    match = _NUMERIC_DATE_RE.match(trimmed)
    if match is None:
        return ""

    p1, p2, p3 = match.groups()
    n1, n2, n3 = int(p1), int(p2), int(p3)

    if len(p1) == 4:
        year, month, day = n1, n2, n3
    elif len(p3) == 4:
        # mm/dd/yyyy unless the first part cannot be a month.
        year = n3
        month, day = (n2, n1) if n1 > 12 else (n1, n2)
    else:
        return ""

    try:
        return _format(date(year, month, day), cfg)
    except ValueError:
        return ""


def _parse_iso(text: str) -> Optional[date]:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _parse_textual(text: str) -> Optional[date]:
    for fmt in _TEXTUAL_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _format(value: date, config: ReconcilerConfig) -> str:
    if not (config.DATE_MIN_YEAR <= value.year <= config.DATE_MAX_YEAR):
        return ""
    return value.strftime("%Y-%m-%d")
