"""Grid geometry: cell sizing, region rectangles and in-region content flow.

Grid inputs (margins, gutter) are device pixels; everything produced here is
in inches. Regions may overlap; that is left to whoever writes the slide spec.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .spec import Anchor, ContentItem, ContentKind, Grid, Region, SlideSpec

logger = logging.getLogger(__name__)

PX_PER_INCH = 96
INNER_PADDING = 0.15
FLOW_GAP = 0.15
OVERFLOW_EPSILON = 0.15


def px_to_in(px: float) -> float:
    return float(px) / PX_PER_INCH


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h


@dataclass(frozen=True)
class GridCalc:
    margin_top: float
    margin_right: float
    margin_bottom: float
    margin_left: float
    gutter: float
    inner_width: float
    inner_height: float
    col_width: float
    row_height: float


def compute_grid(grid: Grid, slide_dims: Tuple[float, float]) -> GridCalc:
    """Convert a px grid into inch cell sizes for a ``(width, height)`` slide.

    Negative sizes (margins or gutters larger than the slide) clamp to zero.
    """
    width, height = slide_dims
    cols = max(1, int(grid.cols))
    rows = max(1, int(grid.rows))
    gutter = px_to_in(max(0.0, grid.gutter))
    mt, mr, mb, ml = (px_to_in(grid.margin.t), px_to_in(grid.margin.r), px_to_in(grid.margin.b), px_to_in(grid.margin.l))

    inner_w = max(0.0, width - ml - mr)
    inner_h = max(0.0, height - mt - mb)
    return GridCalc(
        margin_top=mt,
        margin_right=mr,
        margin_bottom=mb,
        margin_left=ml,
        gutter=gutter,
        inner_width=inner_w,
        inner_height=inner_h,
        col_width=max(0.0, (inner_w - gutter * (cols - 1)) / cols),
        row_height=max(0.0, (inner_h - gutter * (rows - 1)) / rows),
    )


def region_rect(region: Region, calc: GridCalc) -> Rect:
    """Absolute rectangle of ``region``; spans past the grid are not rejected."""
    return Rect(
        x=calc.margin_left + (region.col_start - 1) * (calc.col_width + calc.gutter),
        y=calc.margin_top + (region.row_start - 1) * (calc.row_height + calc.gutter),
        w=region.col_span * calc.col_width + (region.col_span - 1) * calc.gutter,
        h=region.row_span * calc.row_height + (region.row_span - 1) * calc.gutter,
    )


def layout_regions(spec: SlideSpec, slide_dims: Optional[Tuple[float, float]] = None) -> Dict[str, Rect]:
    """Region name -> rectangle, in declaration order. The first declaration of a name wins."""
    calc = compute_grid(spec.layout.grid, slide_dims or spec.dimensions)
    rects: Dict[str, Rect] = {}
    for region in spec.layout.regions:
        if region.name not in rects:
            rects[region.name] = region_rect(region, calc)
    return rects


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


PREFERRED_HEIGHTS: Dict[ContentKind, Callable[[float], float]] = {
    ContentKind.TITLE: lambda remaining: _clamp(0.8, 0.6, min(1.0, remaining)),
    ContentKind.SUBTITLE: lambda remaining: _clamp(0.5, 0.4, min(0.7, remaining)),
    ContentKind.BULLET_GROUP: lambda remaining: max(remaining - 0.3, 2.2),
    ContentKind.CALLOUT: lambda remaining: _clamp(1.0, 0.7, min(1.2, remaining)),
    ContentKind.CHART: lambda remaining: max(2.0, remaining * 0.6),
    ContentKind.IMAGE: lambda remaining: _clamp(min(remaining, 3.5), 1.5, 3.5),
    ContentKind.PLACEHOLDER: lambda remaining: _clamp(min(remaining, 3.5), 1.5, 3.5),
}


def preferred_height(kind: ContentKind, remaining: float) -> float:
    return PREFERRED_HEIGHTS[kind](remaining)


# (cursor_y, preferred_height, region) -> height to place, or None to stop the region.
OverflowPolicy = Callable[[float, float, Rect], Optional[float]]


def truncate_overflow(cursor: float, height: float, region: Rect) -> Optional[float]:
    """Stop the region once the cursor is past its bottom edge; never resize."""
    if cursor > region.bottom - OVERFLOW_EPSILON:
        return None
    return height


def shrink_to_fit(cursor: float, height: float, region: Rect) -> Optional[float]:
    """Clip each anchor to the space left; stop when almost nothing is left."""
    remaining = region.bottom - cursor
    if remaining <= OVERFLOW_EPSILON:
        return None
    return min(height, remaining)


@dataclass(frozen=True)
class FlowSlot:
    anchor: Anchor
    item: ContentItem
    rect: Rect


def flow_anchors(
    region: Rect,
    anchors: Iterable[Anchor],
    resolve_content: Callable[[str], Optional[ContentItem]],
    overflow_policy: OverflowPolicy = truncate_overflow,
    *,
    padding: float = INNER_PADDING,
    gap: float = FLOW_GAP,
) -> List[FlowSlot]:
    """Stack anchors top to bottom inside ``region`` in ascending ``order``.

    Unresolved references are skipped. Once the overflow policy refuses an
    anchor, every remaining anchor in the region is dropped.
    """
    ordered = sorted(anchors, key=lambda a: a.order)
    cursor = region.y + padding
    inner_x = region.x + padding
    inner_w = max(0.0, region.w - 2 * padding)
    slots: List[FlowSlot] = []

    for index, anchor in enumerate(ordered):
        item = resolve_content(anchor.ref_id)
        if item is None:
            logger.debug("Skipping anchor with unknown refId %r", anchor.ref_id)
            continue

        remaining = region.bottom - cursor
        height = overflow_policy(cursor, preferred_height(item.kind, remaining), region)
        if height is None:
            skipped = [a.ref_id for a in ordered[index:]]
            logger.debug("Region overflow at y=%.3f; dropping %s", cursor, skipped)
            break

        slots.append(FlowSlot(anchor=anchor, item=item, rect=Rect(inner_x, cursor, inner_w, height)))
        cursor += height + gap

    return slots


def flow_spec(
    spec: SlideSpec,
    slide_dims: Optional[Tuple[float, float]] = None,
    overflow_policy: OverflowPolicy = truncate_overflow,
) -> List[FlowSlot]:
    """Flow every region of ``spec`` and return slots in draw order.

    Draw order is anchor order across the whole slide (ties keep declaration
    order), so where regions overlap the later anchor paints on top.
    """
    regions = layout_regions(spec, slide_dims)
    by_region: Dict[str, List[Anchor]] = {name: [] for name in regions}
    declared: Dict[int, int] = {}
    for index, anchor in enumerate(spec.layout.anchors):
        if anchor.region not in by_region:
            logger.debug("Skipping anchor %r for undeclared region %r", anchor.ref_id, anchor.region)
            continue
        by_region[anchor.region].append(anchor)
        declared.setdefault(id(anchor), index)

    slots: List[FlowSlot] = []
    for name, rect in regions.items():
        slots.extend(flow_anchors(rect, by_region[name], spec.content.resolve, overflow_policy))
    slots.sort(key=lambda slot: (slot.anchor.order, declared[id(slot.anchor)]))
    return slots
