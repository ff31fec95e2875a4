"""Floating-surface sizing and placement arithmetic.

Everything here is pure: no Qt types, no host calls. Hosts convert the
character-cell result to pixels with ``FloatingLayout.pixel_size``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

MIN_WIDTH_CHARS = 40
MIN_HEIGHT_CHARS = 10
RIGHT_MARGIN_PX = 30
TOP_OFFSET_PX = 20


@dataclass(frozen=True)
class FloatingLayout:
    width_chars: int
    height_chars: int
    left: int
    top: int

    def pixel_size(self, char_width_px: float, char_height_px: float) -> Tuple[int, int]:
        return (
            int(round(self.width_chars * char_width_px)),
            int(round(self.height_chars * char_height_px)),
        )


def compute_layout(
    parent_width_px: float,
    parent_height_px: float,
    char_width_px: float,
    char_height_px: float,
    width_ratio: float,
    height_ratio: float,
) -> FloatingLayout:
    """Size the floating surface from its parent and anchor it top-right.

    Ratios are used as given. ``char_width_px`` and ``char_height_px`` must be
    positive; callers are expected to pass real font metrics.
    """
    width_chars = max(MIN_WIDTH_CHARS, math.floor(parent_width_px / char_width_px * width_ratio))
    height_chars = max(MIN_HEIGHT_CHARS, math.floor(parent_height_px / char_height_px * height_ratio))
    left = math.floor(parent_width_px - width_chars * char_width_px - RIGHT_MARGIN_PX)
    return FloatingLayout(
        width_chars=int(width_chars),
        height_chars=int(height_chars),
        left=left,
        top=TOP_OFFSET_PX,
    )
