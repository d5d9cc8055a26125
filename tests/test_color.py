from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from slideforge.color import (  # noqa: E402
    PALETTE_PRESETS,
    SAFE_FALLBACK_ACCENT,
    adjust_color,
    contrast_ratio,
    ensure_accessible_accent,
    generate_neutral_ramp,
    generate_palette,
    hex_to_rgb,
    luminance,
    readable_text_color,
    select_context,
    select_palette_by_context,
)


def test_contrast_ratio_known_values() -> None:
    assert contrast_ratio("#000000", "#FFFFFF") == pytest.approx(21.0, abs=0.01)
    assert contrast_ratio("#1E40AF", "#1E40AF") == pytest.approx(1.0)
    assert contrast_ratio("#CCCCCC", "#DDDDDD") < 4.5


def test_contrast_ratio_is_symmetric() -> None:
    pairs = [("#1E40AF", "#F8FAFC"), ("#F59E0B", "#0F172A"), ("#123456", "#ABCDEF")]
    for a, b in pairs:
        assert contrast_ratio(a, b) == pytest.approx(contrast_ratio(b, a))


def test_hex_parsing() -> None:
    assert hex_to_rgb("#abc") == (170, 187, 204)
    assert hex_to_rgb("0F172A") == (15, 23, 42)
    with pytest.raises(ValueError):
        hex_to_rgb("#12345G")
    assert luminance("#FFFFFF") == pytest.approx(1.0)
    assert luminance("#000000") == pytest.approx(0.0)


def test_adjust_color_scales_and_clamps() -> None:
    assert adjust_color("#808080", -0.5) == "#404040"
    assert adjust_color("#FFFFFF", 0.5) == "#FFFFFF"
    assert adjust_color("#000000", 0.5) == "#000000"


def test_accent_kept_when_already_accessible() -> None:
    assert ensure_accessible_accent("#FFFFFF", "#000000", background="#FFFFFF") == "#000000"


def test_accent_uses_first_passing_fallback() -> None:
    out = ensure_accessible_accent("#FFFFFF", "#FFFF00", fallbacks=("#1E3A8A",), background="#FFFFFF")
    assert out == "#1E3A8A"


def test_accent_unsatisfiable_returns_safe_fallback(caplog: pytest.LogCaptureFixture) -> None:
    # Against black primary and white background no color clears both bars.
    with caplog.at_level(logging.WARNING, logger="slideforge.color"):
        out = ensure_accessible_accent("#000000", "#777777", background="#FFFFFF")
    assert out == SAFE_FALLBACK_ACCENT
    assert "No accent meets contrast minimums" in caplog.text


def test_malformed_accent_falls_through_to_fallbacks() -> None:
    out = ensure_accessible_accent("#FFFFFF", "not-a-color", fallbacks=("#1E3A8A",), background="#FFFFFF")
    assert out == "#1E3A8A"


def test_malformed_accent_without_usable_fallback_returns_safe_accent() -> None:
    out = ensure_accessible_accent("#1E40AF", "not-a-color", fallbacks=("#000000",))
    assert out == SAFE_FALLBACK_ACCENT


@pytest.mark.parametrize(
    "primary,accent,background",
    [
        ("#1E40AF", "#F59E0B", "#F8FAFC"),
        ("#005EB8", "#F3C13A", "#FFFFFF"),
        ("#0F172A", "#10B981", "#F8FAFC"),
        ("#7C3AED", "#EC4899", "#FFFFFF"),
    ],
)
def test_accent_result_meets_thresholds_or_is_fallback(primary: str, accent: str, background: str) -> None:
    out = ensure_accessible_accent(primary, accent, background=background)
    if out != SAFE_FALLBACK_ACCENT:
        assert contrast_ratio(primary, out) >= 4.5
        assert contrast_ratio(out, background) >= 7.0


def test_neutral_ramp_endpoints_and_monotonic_luminance() -> None:
    ramp = generate_neutral_ramp("#0F172A", "#F8FAFC", 9)
    assert len(ramp) == 9
    assert ramp[0] == "#0F172A"
    assert ramp[8] == "#F8FAFC"
    lums = [luminance(c) for c in ramp]
    assert lums == sorted(lums)


def test_neutral_ramp_rejects_single_step() -> None:
    with pytest.raises(ValueError):
        generate_neutral_ramp(steps=1)


def test_palette_selection_by_keywords() -> None:
    assert select_context("Quarterly revenue and profit forecast") == "finance"
    assert select_palette_by_context("Patient outcomes at our hospital") is PALETTE_PRESETS["healthcare"]


def test_palette_selection_defaults_to_corporate() -> None:
    assert select_context("") == "corporate"
    assert select_context("lorem ipsum dolor") == "corporate"


def test_palette_selection_tie_goes_to_earlier_context() -> None:
    # "software" scores 3 for tech, "revenue" 3 for finance; tech is declared first.
    assert select_context("software revenue") == "tech"


def test_generate_palette_is_complete() -> None:
    palette = generate_palette("cloud platform roadmap")
    data = palette.as_dict()
    assert data["name"] == "Tech Blue"
    assert len(data["neutral"]) == 9
    assert data["accent"].startswith("#")


def test_readable_text_color_prefers_dark_on_light() -> None:
    assert readable_text_color("#FFFFFF") == "#0F172A"
    assert readable_text_color("#0F172A") == "#FFFFFF"
