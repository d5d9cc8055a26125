"""Typed slide spec model.

A ``SlideSpec`` is built once per slide from the JSON payload and treated as
read-only for the whole render. Content items form a closed set of frozen
dataclasses; consumers dispatch on the item class instead of on strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, Optional, Tuple, Union

ASPECT_RATIOS: Dict[str, Tuple[float, float]] = {
    "16:9": (10.0, 5.625),
    "4:3": (10.0, 7.5),
}

DEFAULT_NEUTRAL_9: Tuple[str, ...] = (
    "#0F172A",
    "#1E293B",
    "#334155",
    "#475569",
    "#64748B",
    "#94A3B8",
    "#CBD5E1",
    "#E2E8F0",
    "#F8FAFC",
)
DEFAULT_PRIMARY = "#1E40AF"
DEFAULT_ACCENT = "#F59E0B"

DEFAULT_SIZES: Dict[str, float] = {
    "step_-2": 12,
    "step_-1": 14,
    "step_0": 16,
    "step_1": 20,
    "step_2": 24,
    "step_3": 44,
}

_HEX6 = re.compile(r"^#[0-9A-Fa-f]{6}$")


def is_hex6(value: Any) -> bool:
    return isinstance(value, str) and bool(_HEX6.match(value))


def slide_dimensions(aspect_ratio: str) -> Tuple[float, float]:
    """Slide (width, height) in inches; unknown ratios fall back to 16:9."""
    return ASPECT_RATIOS.get(aspect_ratio, ASPECT_RATIOS["16:9"])


class ContentKind(str, Enum):
    TITLE = "title"
    SUBTITLE = "subtitle"
    BULLET_GROUP = "bulletGroup"
    CALLOUT = "callout"
    CHART = "chart"
    IMAGE = "image"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class Title:
    kind: ClassVar[ContentKind] = ContentKind.TITLE
    id: str
    text: str


@dataclass(frozen=True)
class Subtitle:
    kind: ClassVar[ContentKind] = ContentKind.SUBTITLE
    id: str
    text: str


@dataclass(frozen=True)
class BulletItem:
    text: str
    level: int = 1


@dataclass(frozen=True)
class BulletGroup:
    kind: ClassVar[ContentKind] = ContentKind.BULLET_GROUP
    id: str
    items: Tuple[BulletItem, ...] = ()

    @property
    def text(self) -> str:
        return "\n".join(item.text for item in self.items)


@dataclass(frozen=True)
class Callout:
    kind: ClassVar[ContentKind] = ContentKind.CALLOUT
    id: str
    text: str
    title: Optional[str] = None
    variant: str = "note"


@dataclass(frozen=True)
class Series:
    name: str
    values: Tuple[float, ...]


@dataclass(frozen=True)
class Chart:
    kind: ClassVar[ContentKind] = ContentKind.CHART
    id: str
    chart_type: str = "bar"
    labels: Tuple[str, ...] = ()
    series: Tuple[Series, ...] = ()
    title: Optional[str] = None
    value_format: Optional[str] = None


@dataclass(frozen=True)
class Image:
    kind: ClassVar[ContentKind] = ContentKind.IMAGE
    id: str
    role: str = "illustration"
    alt: str = ""
    url: Optional[str] = None
    query: Optional[str] = None
    source_type: str = "url"
    fit: str = "contain"


@dataclass(frozen=True)
class ImagePlaceholder:
    kind: ClassVar[ContentKind] = ContentKind.PLACEHOLDER
    id: str
    role: str = "illustration"
    alt: str = ""


ContentItem = Union[Title, Subtitle, BulletGroup, Callout, Chart, Image, ImagePlaceholder]


@dataclass(frozen=True)
class Content:
    title: Optional[Title] = None
    subtitle: Optional[Subtitle] = None
    bullet_groups: Tuple[BulletGroup, ...] = ()
    callouts: Tuple[Callout, ...] = ()
    chart: Optional[Chart] = None
    images: Tuple[Image, ...] = ()
    image_placeholders: Tuple[ImagePlaceholder, ...] = ()

    def items(self) -> Iterator[ContentItem]:
        if self.title is not None:
            yield self.title
        if self.subtitle is not None:
            yield self.subtitle
        yield from self.bullet_groups
        yield from self.callouts
        if self.chart is not None:
            yield self.chart
        yield from self.images
        yield from self.image_placeholders

    def resolve(self, ref_id: str) -> Optional[ContentItem]:
        """Return the content item with ``ref_id`` or None for a dangling reference."""
        for item in self.items():
            if item.id == ref_id:
                return item
        return None


@dataclass(frozen=True)
class Margin:
    t: float = 40.0
    r: float = 40.0
    b: float = 40.0
    l: float = 40.0  # noqa: E741


@dataclass(frozen=True)
class Grid:
    rows: int = 8
    cols: int = 12
    gutter: float = 12.0
    margin: Margin = field(default_factory=Margin)


@dataclass(frozen=True)
class Region:
    name: str
    row_start: int = 1
    col_start: int = 1
    row_span: int = 1
    col_span: int = 1


@dataclass(frozen=True)
class Anchor:
    ref_id: str
    region: str
    order: int = 0


@dataclass(frozen=True)
class Layout:
    grid: Grid = field(default_factory=Grid)
    regions: Tuple[Region, ...] = ()
    anchors: Tuple[Anchor, ...] = ()

    def region(self, name: str) -> Optional[Region]:
        return next((r for r in self.regions if r.name == name), None)


@dataclass(frozen=True)
class Palette:
    primary: str = DEFAULT_PRIMARY
    accent: str = DEFAULT_ACCENT
    neutral: Tuple[str, ...] = DEFAULT_NEUTRAL_9

    @property
    def darkest(self) -> str:
        return self.neutral[0]

    @property
    def lightest(self) -> str:
        return self.neutral[-1]


@dataclass(frozen=True)
class Typography:
    fonts: Dict[str, str] = field(default_factory=lambda: {"sans": "Aptos"})
    sizes: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SIZES))
    weights: Dict[str, int] = field(
        default_factory=lambda: {"regular": 400, "medium": 500, "semibold": 600, "bold": 700}
    )
    line_heights: Dict[str, float] = field(default_factory=lambda: {"compact": 1.2, "standard": 1.5})

    def size(self, step: str) -> float:
        return float(self.sizes.get(step, DEFAULT_SIZES.get(step, 16)))

    @property
    def font(self) -> str:
        return self.fonts.get("sans") or "Aptos"


@dataclass(frozen=True)
class Contrast:
    min_text_contrast: float = 7.0
    min_ui_contrast: float = 4.5


@dataclass(frozen=True)
class StyleTokens:
    palette: Palette = field(default_factory=Palette)
    typography: Typography = field(default_factory=Typography)
    spacing: Dict[str, Any] = field(default_factory=dict)
    radii: Dict[str, float] = field(default_factory=dict)
    shadows: Dict[str, str] = field(default_factory=dict)
    contrast: Contrast = field(default_factory=Contrast)


@dataclass(frozen=True)
class Meta:
    version: str = "1.0"
    locale: str = "en-US"
    theme: str = "default"
    aspect_ratio: str = "16:9"


@dataclass(frozen=True)
class SlideSpec:
    meta: Meta = field(default_factory=Meta)
    content: Content = field(default_factory=Content)
    layout: Layout = field(default_factory=Layout)
    style_tokens: StyleTokens = field(default_factory=StyleTokens)

    @property
    def dimensions(self) -> Tuple[float, float]:
        return slide_dimensions(self.meta.aspect_ratio)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlideSpec":
        """Build a spec from the JSON payload shape.

        Parsing is lenient: missing optional sections get defaults and bad
        entries are dropped. Structural checks live in ``validation``.
        """
        meta = _dict(data.get("meta"))
        content = _dict(data.get("content"))
        layout = _dict(data.get("layout"))
        tokens = _dict(data.get("styleTokens"))
        return cls(
            meta=Meta(
                version=str(meta.get("version") or "1.0"),
                locale=str(meta.get("locale") or "en-US"),
                theme=str(meta.get("theme") or "default"),
                aspect_ratio=str(meta.get("aspectRatio") or "16:9"),
            ),
            content=_parse_content(content),
            layout=_parse_layout(layout),
            style_tokens=_parse_style_tokens(tokens),
        )


def sanitize_palette(raw: Any) -> Palette:
    """Coerce a palette payload into a valid ``Palette`` with exactly 9 neutrals."""
    raw = _dict(raw)
    primary = raw.get("primary") if is_hex6(raw.get("primary")) else DEFAULT_PRIMARY
    accent = raw.get("accent") if is_hex6(raw.get("accent")) else DEFAULT_ACCENT

    neutral_in = raw.get("neutral") if isinstance(raw.get("neutral"), list) else []
    cleaned = [c for c in neutral_in if is_hex6(c)]
    if len(cleaned) >= 5:
        neutral = cleaned[:9]
        while len(neutral) < 9:
            neutral.append(DEFAULT_NEUTRAL_9[len(neutral)])
    else:
        neutral = list(DEFAULT_NEUTRAL_9)
    return Palette(primary=primary, accent=accent, neutral=tuple(neutral))


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_content(content: Dict[str, Any]) -> Content:
    title = _dict(content.get("title"))
    subtitle = _dict(content.get("subtitle"))

    groups = []
    for raw in _list(content.get("bullets") or content.get("bulletGroups")):
        raw = _dict(raw)
        if not raw.get("id"):
            continue
        items = []
        for item in _list(raw.get("items")):
            if isinstance(item, str):
                items.append(BulletItem(text=item))
            elif isinstance(item, dict) and str(item.get("text") or "").strip():
                level = max(1, min(3, _int(item.get("level"), 1)))
                items.append(BulletItem(text=str(item["text"]), level=level))
        groups.append(BulletGroup(id=str(raw["id"]), items=tuple(items)))

    callouts = []
    for raw in _list(content.get("callouts")):
        raw = _dict(raw)
        if not raw.get("id"):
            continue
        callouts.append(
            Callout(
                id=str(raw["id"]),
                text=str(raw.get("text") or ""),
                title=_opt_str(raw.get("title")),
                variant=str(raw.get("variant") or raw.get("type") or "note"),
            )
        )

    chart = None
    raw_chart = _dict(content.get("dataViz") or content.get("chart"))
    if raw_chart.get("id"):
        series = []
        for s in _list(raw_chart.get("series")):
            s = _dict(s)
            values = tuple(_float(v, 0.0) for v in _list(s.get("values")))
            series.append(Series(name=str(s.get("name") or "Series"), values=values))
        chart = Chart(
            id=str(raw_chart["id"]),
            chart_type=str(raw_chart.get("kind") or raw_chart.get("type") or "bar").lower(),
            labels=tuple(str(label) for label in _list(raw_chart.get("labels"))),
            series=tuple(series),
            title=_opt_str(raw_chart.get("title")),
            value_format=_opt_str(raw_chart.get("valueFormat")),
        )

    images = []
    for raw in _list(content.get("images")):
        raw = _dict(raw)
        if not raw.get("id"):
            continue
        source = _dict(raw.get("source"))
        images.append(
            Image(
                id=str(raw["id"]),
                role=str(raw.get("role") or "illustration"),
                alt=str(raw.get("alt") or ""),
                url=_opt_str(source.get("url") or raw.get("url")),
                query=_opt_str(source.get("query")),
                source_type=str(source.get("type") or "url"),
                fit=str(raw.get("fit") or "contain"),
            )
        )

    placeholders = []
    for raw in _list(content.get("imagePlaceholders")):
        raw = _dict(raw)
        if not raw.get("id"):
            continue
        placeholders.append(
            ImagePlaceholder(
                id=str(raw["id"]),
                role=str(raw.get("role") or "illustration"),
                alt=str(raw.get("alt") or ""),
            )
        )

    return Content(
        title=Title(id=str(title["id"]), text=str(title.get("text") or "")) if title.get("id") else None,
        subtitle=Subtitle(id=str(subtitle["id"]), text=str(subtitle.get("text") or "")) if subtitle.get("id") else None,
        bullet_groups=tuple(groups),
        callouts=tuple(callouts),
        chart=chart,
        images=tuple(images),
        image_placeholders=tuple(placeholders),
    )


def _parse_layout(layout: Dict[str, Any]) -> Layout:
    grid = _dict(layout.get("grid"))
    margin = _dict(grid.get("margin"))
    regions = []
    for raw in _list(layout.get("regions")):
        raw = _dict(raw)
        if not raw.get("name"):
            continue
        regions.append(
            Region(
                name=str(raw["name"]),
                row_start=_int(raw.get("rowStart"), 1),
                col_start=_int(raw.get("colStart"), 1),
                row_span=_int(raw.get("rowSpan"), 1),
                col_span=_int(raw.get("colSpan"), 1),
            )
        )
    anchors = []
    for raw in _list(layout.get("anchors")):
        raw = _dict(raw)
        if not raw.get("refId") or not raw.get("region"):
            continue
        anchors.append(Anchor(ref_id=str(raw["refId"]), region=str(raw["region"]), order=_int(raw.get("order"), 0)))
    return Layout(
        grid=Grid(
            rows=max(1, _int(grid.get("rows"), 8)),
            cols=max(1, _int(grid.get("cols"), 12)),
            gutter=max(0.0, _float(grid.get("gutter"), 12.0)),
            margin=Margin(
                t=_float(margin.get("t"), 40.0),
                r=_float(margin.get("r"), 40.0),
                b=_float(margin.get("b"), 40.0),
                l=_float(margin.get("l"), 40.0),
            ),
        ),
        regions=tuple(regions),
        anchors=tuple(anchors),
    )


def _parse_style_tokens(tokens: Dict[str, Any]) -> StyleTokens:
    typography = _dict(tokens.get("typography"))
    contrast = _dict(tokens.get("contrast"))
    defaults = Typography()
    return StyleTokens(
        palette=sanitize_palette(tokens.get("palette")),
        typography=Typography(
            fonts={**defaults.fonts, **{k: str(v) for k, v in _dict(typography.get("fonts")).items() if v}},
            sizes={**defaults.sizes, **{k: _float(v, 16) for k, v in _dict(typography.get("sizes")).items()}},
            weights={**defaults.weights, **{k: _int(v, 400) for k, v in _dict(typography.get("weights")).items()}},
            line_heights={
                **defaults.line_heights,
                **{k: _float(v, 1.2) for k, v in _dict(typography.get("lineHeights")).items()},
            },
        ),
        spacing=_dict(tokens.get("spacing")),
        radii=_dict(tokens.get("radii")),
        shadows=_dict(tokens.get("shadows")),
        contrast=Contrast(
            min_text_contrast=_float(contrast.get("minTextContrast"), 7.0),
            min_ui_contrast=_float(contrast.get("minUiContrast"), 4.5),
        ),
    )
