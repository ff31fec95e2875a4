"""Label and name helpers for excerpt views."""
from __future__ import annotations

import re
import string
from typing import Mapping

from excerpt_overlay.host import ExcerptRange

ELLIPSIS = "..."
_WHITESPACE_RUN = re.compile(r"[ \t\n\r]+")


def format_label(raw_text: str, max_len: int) -> str:
    """Collapse whitespace runs and bound the result to ``max_len`` characters.

    Longer text keeps ``max_len - 3`` characters followed by ``...``. When
    ``max_len`` is too small to hold the marker the text is cut without one.
    """
    collapsed = _WHITESPACE_RUN.sub(" ", raw_text).strip(" ")
    if len(collapsed) <= max_len:
        return collapsed
    if max_len < len(ELLIPSIS):
        return collapsed[: max(0, max_len)]
    return collapsed[: max_len - len(ELLIPSIS)] + ELLIPSIS


def format_excerpt_name(prefix: str, source_name: str, separator: str, label: str) -> str:
    return f"{prefix}{source_name}{separator}{label}"


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def format_region_header(
    template: str,
    source_name: str,
    excerpt_range: ExcerptRange,
    label: str,
) -> str:
    """Render the per-region header; unknown placeholders are left as written."""
    fields: Mapping[str, object] = _KeepMissing(
        source=source_name,
        start=excerpt_range.start,
        end=excerpt_range.end,
        label=label,
    )
    try:
        return string.Formatter().vformat(template, (), fields)
    except (ValueError, IndexError, AttributeError, KeyError):
        return template
