"""Turn a ``SlideSpec`` into positioned, sized and colored draw instructions.

The planner is pure: it knows nothing about python-pptx. Rendering stages
hand the resulting ``SlidePlan`` to a canvas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

from .color import adjust_color, contrast_ratio, ensure_accessible_accent
from .grid import FlowSlot, Rect, flow_spec
from .spec import (
    BulletGroup,
    Callout,
    Chart,
    Image,
    ImagePlaceholder,
    Palette,
    SlideSpec,
    Subtitle,
    Title,
)
from .typography import fit_text

logger = logging.getLogger(__name__)

MAX_BULLETS = 7
CALLOUT_STRIPE_W = 0.15
ACCENT_BAR_H = 0.08

SUPPORTED_CHART_KINDS = ("bar", "column", "line", "pie", "doughnut", "donut", "area", "radar")

NUMBER_FORMATS: Dict[str, str] = {
    "percent": "0%",
    "currency": "$#,##0",
    "decimal": "0.00",
    "number": "0",
}


class InstructionKind(str, Enum):
    TEXT = "text"
    SHAPE = "shape"
    IMAGE = "image"
    CHART = "chart"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class TextRun:
    text: str
    font_size: float
    color: str
    bold: bool = False
    level: int = 0


@dataclass(frozen=True)
class DrawInstruction:
    kind: InstructionKind
    rect: Rect
    ref_id: Optional[str] = None
    runs: Tuple[TextRun, ...] = ()
    font_face: str = "Aptos"
    bullets: bool = False
    fill: Optional[str] = None
    line: Optional[str] = None
    line_width: float = 0.0
    rounded: bool = False
    chart: Optional[Chart] = None
    chart_colors: Tuple[str, ...] = ()
    number_format: Optional[str] = None
    image_url: Optional[str] = None
    alt: str = ""
    truncated: bool = False


@dataclass(frozen=True)
class ResolvedColors:
    background: str
    text: str
    secondary: str
    primary: str
    accent: str
    muted_fill: str


@dataclass(frozen=True)
class SlidePlan:
    width: float
    height: float
    colors: ResolvedColors
    instructions: List[DrawInstruction] = field(default_factory=list)

    @property
    def background(self) -> str:
        return self.colors.background

    def of_kind(self, kind: InstructionKind) -> List[DrawInstruction]:
        return [i for i in self.instructions if i.kind == kind]


CALLOUT_COLORS: Dict[str, Tuple[str, str, str]] = {
    # variant: (fill, border, text)
    "success": ("#D1FAE5", "#10B981", "#065F46"),
    "warning": ("#FEF3C7", "#F59E0B", "#78350F"),
    "danger": ("#FEE2E2", "#EF4444", "#7F1D1D"),
    "insight": ("#E0E7FF", "", "#312E81"),
    "note": ("#F3F4F6", "", "#1F2937"),
}


def callout_colors(variant: str, palette: Palette) -> Tuple[str, str, str]:
    fill, border, text = CALLOUT_COLORS.get(variant, CALLOUT_COLORS["note"])
    if not border:
        border = palette.primary if variant == "insight" else palette.accent
    return fill, border, text


def _readable(candidate: str, background: str, minimum: float, fallback: str) -> str:
    return candidate if contrast_ratio(candidate, background) >= minimum else fallback


def resolve_colors(spec: SlideSpec) -> ResolvedColors:
    """Pick text, accent and fill colors that meet the slide's contrast minimums."""
    palette = spec.style_tokens.palette
    contrast = spec.style_tokens.contrast
    background = palette.lightest
    text = _readable(palette.darkest, background, contrast.min_text_contrast, "#000000")

    secondary = text
    for candidate in (palette.neutral[3], palette.neutral[2], palette.neutral[1]):
        if contrast_ratio(candidate, background) >= contrast.min_text_contrast:
            secondary = candidate
            break

    accent = ensure_accessible_accent(
        palette.primary,
        palette.accent,
        background=background,
        min_primary=contrast.min_ui_contrast,
        min_background=contrast.min_text_contrast,
    )
    return ResolvedColors(
        background=background,
        text=text,
        secondary=secondary,
        primary=_readable(palette.primary, background, contrast.min_text_contrast, text),
        accent=accent,
        muted_fill=palette.neutral[7],
    )


def chart_series_colors(palette: Palette) -> Tuple[str, ...]:
    return (
        palette.primary,
        palette.accent,
        adjust_color(palette.primary, -0.20),
        adjust_color(palette.accent, -0.20),
        palette.neutral[2],
        palette.neutral[3],
    )


def image_url(image: Image) -> Optional[str]:
    if image.source_type == "unsplash" and image.query:
        return f"https://source.unsplash.com/random?{quote(image.query)}"
    return image.url


class _Planner:
    def __init__(self, spec: SlideSpec, *, remote_images: bool):
        self.spec = spec
        self.remote_images = remote_images
        self.colors = resolve_colors(spec)
        self.typography = spec.style_tokens.typography
        self.compact = self.typography.line_heights.get("compact", 1.2)
        self.standard = self.typography.line_heights.get("standard", 1.5)

    def plan(self, slot: FlowSlot) -> List[DrawInstruction]:
        item = slot.item
        if isinstance(item, Title):
            return [self._title(item, slot.rect)]
        if isinstance(item, Subtitle):
            return [self._subtitle(item, slot.rect)]
        if isinstance(item, BulletGroup):
            return [self._bullets(item, slot.rect)]
        if isinstance(item, Callout):
            return self._callout(item, slot.rect)
        if isinstance(item, Chart):
            return [self._chart(item, slot.rect)]
        if isinstance(item, Image):
            return [self._image(item, slot.rect)]
        if isinstance(item, ImagePlaceholder):
            return [self._placeholder(item.id, slot.rect, item.alt or item.role)]
        raise TypeError(f"Unsupported content item: {type(item).__name__}")

    def _text(self, ref_id: str, rect: Rect, text: str, *, start: float, floor: float, color: str, bold: bool, lh: float):
        fitted = fit_text(text, rect.w, rect.h, int(start), int(floor), lh)
        return DrawInstruction(
            kind=InstructionKind.TEXT,
            rect=rect,
            ref_id=ref_id,
            runs=(TextRun(fitted.text, fitted.font_size, color, bold),),
            font_face=self.typography.font,
            truncated=fitted.truncated,
        )

    def _title(self, item: Title, rect: Rect) -> DrawInstruction:
        return self._text(
            item.id,
            rect,
            item.text,
            start=self.typography.size("step_3"),
            floor=self.typography.size("step_1"),
            color=self.colors.primary,
            bold=True,
            lh=self.compact,
        )

    def _subtitle(self, item: Subtitle, rect: Rect) -> DrawInstruction:
        return self._text(
            item.id,
            rect,
            item.text,
            start=self.typography.size("step_2"),
            floor=self.typography.size("step_-1"),
            color=self.colors.secondary,
            bold=False,
            lh=self.compact,
        )

    def _bullets(self, group: BulletGroup, rect: Rect) -> DrawInstruction:
        items = group.items[:MAX_BULLETS]
        # Exactly one line per item.
        joined = "\n".join(" ".join(i.text.split()) for i in items)
        fitted = fit_text(
            joined,
            rect.w,
            rect.h,
            int(self.typography.size("step_1")),
            int(self.typography.size("step_-2")),
            self.standard,
        )
        lines = fitted.text.split("\n")
        runs = []
        for item, line in zip(items, lines):
            level = max(0, item.level - 1)
            color = self.colors.text if level == 0 else self.colors.secondary
            runs.append(TextRun(line, max(11, fitted.font_size - level), color, bold=False, level=level))
        return DrawInstruction(
            kind=InstructionKind.TEXT,
            rect=rect,
            ref_id=group.id,
            runs=tuple(runs),
            font_face=self.typography.font,
            bullets=True,
            truncated=fitted.truncated or len(group.items) > MAX_BULLETS,
        )

    def _callout(self, callout: Callout, rect: Rect) -> List[DrawInstruction]:
        fill, border, text_color = callout_colors(callout.variant, self.spec.style_tokens.palette)
        card = DrawInstruction(
            kind=InstructionKind.SHAPE,
            rect=rect,
            ref_id=callout.id,
            fill=fill,
            line=border,
            line_width=2.5,
            rounded=True,
        )
        stripe = DrawInstruction(
            kind=InstructionKind.SHAPE,
            rect=Rect(rect.x, rect.y, min(CALLOUT_STRIPE_W, rect.w), rect.h),
            ref_id=callout.id,
            fill=border,
        )
        inner = Rect(rect.x + 0.3, rect.y + 0.1, max(0.0, rect.w - 0.45), max(0.0, rect.h - 0.2))
        body_size = self.typography.size("step_0")
        fitted = fit_text(callout.text, inner.w, inner.h, int(body_size), 12, self.compact)
        runs = []
        if callout.title:
            runs.append(TextRun(callout.title, fitted.font_size, text_color, bold=True))
        runs.append(TextRun(fitted.text, fitted.font_size, text_color, bold=not callout.title))
        text = DrawInstruction(
            kind=InstructionKind.TEXT,
            rect=inner,
            ref_id=callout.id,
            runs=tuple(runs),
            font_face=self.typography.font,
            truncated=fitted.truncated,
        )
        return [card, stripe, text]

    def _chart(self, chart: Chart, rect: Rect) -> DrawInstruction:
        if chart.chart_type not in SUPPORTED_CHART_KINDS or not chart.series:
            logger.debug("Chart %r (%s) not drawable; using placeholder", chart.id, chart.chart_type)
            return self._placeholder(chart.id, rect, f"[{chart.chart_type}] Visualization")
        return DrawInstruction(
            kind=InstructionKind.CHART,
            rect=rect,
            ref_id=chart.id,
            chart=chart,
            chart_colors=chart_series_colors(self.spec.style_tokens.palette),
            number_format=NUMBER_FORMATS.get(chart.value_format or ""),
            font_face=self.typography.font,
        )

    def _image(self, image: Image, rect: Rect) -> DrawInstruction:
        url = image_url(image)
        if not url or not self.remote_images:
            return self._placeholder(image.id, rect, image.alt or image.role)
        return DrawInstruction(
            kind=InstructionKind.IMAGE,
            rect=rect,
            ref_id=image.id,
            image_url=url,
            alt=image.alt,
        )

    def _placeholder(self, ref_id: str, rect: Rect, label: str) -> DrawInstruction:
        return DrawInstruction(
            kind=InstructionKind.PLACEHOLDER,
            rect=rect,
            ref_id=ref_id,
            fill=self.colors.muted_fill,
            runs=(TextRun(label, 14, self.colors.secondary),),
            font_face=self.typography.font,
            alt=label,
            rounded=True,
        )


def plan_slide(
    spec: SlideSpec,
    slide_dims: Optional[Tuple[float, float]] = None,
    *,
    remote_images: bool = True,
    accent_bar: bool = True,
) -> SlidePlan:
    """Lay out ``spec`` and return draw instructions in paint order.

    With ``remote_images`` off, every image anchor becomes a placeholder so
    the plan can be drawn without network access.
    """
    width, height = slide_dims or spec.dimensions
    planner = _Planner(spec, remote_images=remote_images)
    instructions: List[DrawInstruction] = []
    if accent_bar:
        instructions.append(
            DrawInstruction(kind=InstructionKind.SHAPE, rect=Rect(0.0, 0.0, width, ACCENT_BAR_H), fill=planner.colors.accent)
        )
    for slot in flow_spec(spec, (width, height)):
        instructions.extend(planner.plan(slot))
    return SlidePlan(width=width, height=height, colors=planner.colors, instructions=instructions)
