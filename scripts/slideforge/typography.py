"""Text fitting: optimal font size search and ellipsis truncation.

All measurements are estimates: a glyph is assumed to be half an em wide, and
a 5% safety margin is taken off the box capacity. Box sizes are in inches,
font sizes in points.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict

ACCESSIBILITY_FLOOR_PT = 11
HARD_CAP_PT = 44
CHAR_WIDTH_FACTOR = 0.5
POINTS_PER_INCH = 72
SAFETY_MARGIN = 0.95
ELLIPSIS = "…"


def text_capacity(max_width: float, max_height: float, font_size: float, line_height: float = 1.2) -> int:
    """Number of characters a box holds at ``font_size``."""
    if font_size <= 0:
        return 0
    char_width = font_size / POINTS_PER_INCH * CHAR_WIDTH_FACTOR
    line = font_size / POINTS_PER_INCH * line_height
    chars_per_line = max(1, math.floor(max(0.0, max_width) / char_width))
    max_lines = max(1, math.floor(max(0.0, max_height) / line)) if line > 0 else 1
    return math.floor(chars_per_line * max_lines * SAFETY_MARGIN)


def fits(text: str, max_width: float, max_height: float, font_size: float, line_height: float = 1.2) -> bool:
    return len(text) <= text_capacity(max_width, max_height, font_size, line_height)


def calculate_optimal_font_size(
    text: str,
    max_width: float,
    max_height: float,
    start_size: int = 26,
    min_size: int = 12,
    line_height: float = 1.2,
) -> int:
    """Largest integer size in ``[floor, min(start_size, cap)]`` at which ``text`` fits.

    The floor is ``max(min_size, ACCESSIBILITY_FLOOR_PT)``. When nothing fits,
    the floor is returned and the caller is expected to truncate.
    """
    low = max(int(min_size), ACCESSIBILITY_FLOOR_PT)
    high = min(int(start_size), HARD_CAP_PT)
    best = low
    if high <= low:
        return low

    while low <= high:
        mid = (low + high) // 2
        if fits(text, max_width, max_height, mid, line_height):
            best = mid
            low = mid + 1
        else:
            high = mid - 1
    return best


def truncate_with_ellipsis(
    text: str,
    max_width: float,
    max_height: float,
    font_size: float,
    line_height: float = 1.2,
) -> str:
    """Cut ``text`` so it fits at ``font_size``, ending with an ellipsis.

    Text that already fits is returned unchanged, which makes the operation
    idempotent.
    """
    if fits(text, max_width, max_height, font_size, line_height):
        return text
    capacity = text_capacity(max_width, max_height, font_size, line_height)
    if capacity <= 0:
        return ""
    return text[: max(0, capacity - 3)].rstrip() + ELLIPSIS


@dataclass(frozen=True)
class FittedText:
    text: str
    font_size: int
    truncated: bool


def fit_text(
    text: str,
    max_width: float,
    max_height: float,
    start_size: int = 26,
    min_size: int = 12,
    line_height: float = 1.2,
) -> FittedText:
    size = calculate_optimal_font_size(text, max_width, max_height, start_size, min_size, line_height)
    out = truncate_with_ellipsis(text, max_width, max_height, size, line_height)
    return FittedText(text=out, font_size=size, truncated=out != text)


def typography_scale(base: float = 16, ratio: float = 1.25) -> Dict[str, int]:
    """Modular type scale around ``base``."""
    return {
        "h1": round(base * ratio**4),
        "h2": round(base * ratio**3),
        "h3": round(base * ratio**2),
        "body": round(base),
        "small": round(base * ratio**-1),
        "caption": round(base * ratio**-2),
    }
