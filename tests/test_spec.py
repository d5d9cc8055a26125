from __future__ import annotations

import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from slideforge.spec import (  # noqa: E402
    DEFAULT_NEUTRAL_9,
    DEFAULT_PRIMARY,
    BulletGroup,
    Chart,
    SlideSpec,
    sanitize_palette,
    slide_dimensions,
)


def test_defaults_for_empty_payload() -> None:
    spec = SlideSpec.from_dict({})
    assert spec.dimensions == (10.0, 5.625)
    assert spec.layout.grid.rows == 8
    assert spec.layout.grid.cols == 12
    assert spec.content.title is None
    assert len(spec.style_tokens.palette.neutral) == 9


def test_aspect_ratio_dimensions() -> None:
    assert slide_dimensions("4:3") == (10.0, 7.5)
    assert slide_dimensions("weird") == (10.0, 5.625)


def test_bullets_and_chart_parse() -> None:
    spec = SlideSpec.from_dict(
        {
            "content": {
                "bullets": [
                    {"id": "b1", "items": ["plain", {"text": "deep", "level": 9}, {"text": "  "}]},
                    {"items": ["no id, dropped"]},
                ],
                "dataViz": {
                    "id": "v",
                    "kind": "Line",
                    "labels": ["Q1", "Q2"],
                    "series": [{"name": "Rev", "values": [1, "2.5"]}],
                    "valueFormat": "percent",
                },
            }
        }
    )
    (group,) = spec.content.bullet_groups
    assert isinstance(group, BulletGroup)
    assert [(i.text, i.level) for i in group.items] == [("plain", 1), ("deep", 3)]

    chart = spec.content.resolve("v")
    assert isinstance(chart, Chart)
    assert chart.chart_type == "line"
    assert chart.series[0].values == (1.0, 2.5)
    assert chart.value_format == "percent"


def test_image_source_fields() -> None:
    spec = SlideSpec.from_dict(
        {"content": {"images": [{"id": "i", "alt": "Team", "source": {"type": "unsplash", "query": "office"}}]}}
    )
    image = spec.content.resolve("i")
    assert image.source_type == "unsplash"
    assert image.query == "office"
    assert image.url is None


def test_sanitize_palette_pads_short_neutral_ramp() -> None:
    palette = sanitize_palette(
        {"primary": "#123456", "accent": "nope", "neutral": ["#000000", "#111111", "#222222", "#333333", "#444444"]}
    )
    assert palette.primary == "#123456"
    assert palette.accent == "#F59E0B"
    assert len(palette.neutral) == 9
    assert palette.neutral[:5] == ("#000000", "#111111", "#222222", "#333333", "#444444")
    assert palette.neutral[5:] == DEFAULT_NEUTRAL_9[5:]


def test_sanitize_palette_replaces_unusable_ramp() -> None:
    palette = sanitize_palette({"primary": "red", "neutral": ["#000000", "bad"]})
    assert palette.primary == DEFAULT_PRIMARY
    assert palette.neutral == DEFAULT_NEUTRAL_9
