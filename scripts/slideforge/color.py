"""WCAG color math, accessible accent repair and context-aware palettes."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Rgb = Tuple[int, int, int]

SAFE_FALLBACK_ACCENT = "#F59E0B"
DEFAULT_BACKGROUND = "#FFFFFF"
RAMP_DARKEST = "#0F172A"
RAMP_LIGHTEST = "#F8FAFC"

ADJUST_STEP = 0.10
ADJUST_LIMIT = 0.50

_HEX_RE = re.compile(r"^[0-9A-Fa-f]{6}$")


def hex_to_rgb(value: str) -> Rgb:
    text = str(value or "").strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if not _HEX_RE.match(text):
        raise ValueError(f"Invalid hex color: {value!r}")
    return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)


def _channel(value: float) -> int:
    # Round half up; channels are never negative here.
    return max(0, min(255, int(value + 0.5)))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    return "#" + "".join(f"{_channel(c):02X}" for c in (r, g, b))


def luminance(color: str) -> float:
    """Relative luminance of an sRGB hex color (WCAG 2.x)."""

    def linear(c: int) -> float:
        n = c / 255
        return n / 12.92 if n <= 0.03928 else ((n + 0.055) / 1.055) ** 2.4

    r, g, b = hex_to_rgb(color)
    return 0.2126 * linear(r) + 0.7152 * linear(g) + 0.0722 * linear(b)


def contrast_ratio(a: str, b: str) -> float:
    la = luminance(a)
    lb = luminance(b)
    return (max(la, lb) + 0.05) / (min(la, lb) + 0.05)


def adjust_color(color: str, delta: float) -> str:
    """Scale every channel by ``1 + delta`` (negative darkens), clamped to 0..255."""
    r, g, b = hex_to_rgb(color)
    factor = 1.0 + delta
    return rgb_to_hex(r * factor, g * factor, b * factor)


def meets_contrast(
    primary: str,
    candidate: str,
    background: str,
    *,
    min_primary: float = 4.5,
    min_background: float = 7.0,
) -> bool:
    return (
        contrast_ratio(primary, candidate) >= min_primary
        and contrast_ratio(candidate, background) >= min_background
    )


def _accent_candidates(accent: str, fallbacks: Iterable[str]) -> Iterable[str]:
    yield accent
    yield from fallbacks
    try:
        hex_to_rgb(accent)
    except ValueError:
        return
    step = ADJUST_STEP
    while step <= ADJUST_LIMIT + 1e-9:
        yield adjust_color(accent, -step)
        yield adjust_color(accent, step)
        step += ADJUST_STEP


def ensure_accessible_accent(
    primary: str,
    accent: str,
    fallbacks: Sequence[str] = (),
    background: str = DEFAULT_BACKGROUND,
    min_primary: float = 4.5,
    min_background: float = 7.0,
) -> str:
    """Return the first candidate accent meeting both contrast minimums.

    Candidates are tried in a fixed order: the accent itself, each fallback,
    then the accent darkened and lightened in 10% steps up to 50%. When no
    candidate qualifies the documented ``SAFE_FALLBACK_ACCENT`` is returned.
    """
    for candidate in _accent_candidates(accent, fallbacks):
        try:
            ok = meets_contrast(
                primary,
                candidate,
                background,
                min_primary=min_primary,
                min_background=min_background,
            )
        except ValueError:
            logger.debug("Skipping malformed accent candidate %r", candidate)
            continue
        if ok:
            return candidate.upper() if candidate.startswith("#") else f"#{candidate.upper()}"

    logger.warning(
        "No accent meets contrast minimums (primary=%s, accent=%s, background=%s); using %s",
        primary,
        accent,
        background,
        SAFE_FALLBACK_ACCENT,
    )
    return SAFE_FALLBACK_ACCENT


def generate_neutral_ramp(darkest: str = RAMP_DARKEST, lightest: str = RAMP_LIGHTEST, steps: int = 9) -> List[str]:
    """Linearly interpolate each channel from ``darkest`` to ``lightest``."""
    if steps < 2:
        raise ValueError("steps must be at least 2")
    dark = hex_to_rgb(darkest)
    light = hex_to_rgb(lightest)
    ramp = []
    for i in range(steps):
        t = i / (steps - 1)
        ramp.append(rgb_to_hex(*(d + (l - d) * t for d, l in zip(dark, light))))
    return ramp


def readable_text_color(background: str, candidates: Sequence[str] = (RAMP_DARKEST, "#FFFFFF")) -> str:
    """Pick the candidate with the highest contrast against ``background``."""
    return max(candidates, key=lambda c: contrast_ratio(c, background))


@dataclass(frozen=True)
class PalettePreset:
    name: str
    primary: str
    accent: str
    fallback_accents: Tuple[str, ...] = ()


PALETTE_PRESETS: Dict[str, PalettePreset] = {
    "tech": PalettePreset("Tech Blue", "#1E40AF", "#F59E0B", ("#EA580C", "#D97706")),
    "finance": PalettePreset("Finance Navy", "#0F172A", "#10B981", ("#059669", "#84CC16")),
    "creative": PalettePreset("Creative Purple", "#7C3AED", "#EC4899", ("#DB2777", "#F472B6")),
    "energy": PalettePreset("Energy Orange", "#EA580C", "#F97316", ("#DC2626", "#EF4444")),
    "healthcare": PalettePreset("Healthcare Cyan", "#0891B2", "#06B6D4", ("#0E7490", "#22D3EE")),
    "sustainability": PalettePreset("Sustainability Green", "#15803D", "#84CC16", ("#65A30D", "#A3E635")),
    "corporate": PalettePreset("Corporate Gray", "#1F2937", "#6366F1", ("#4F46E5", "#818CF8")),
    "luxury": PalettePreset("Luxury Gold", "#1E1B4B", "#D4AF37", ("#CA8A04", "#EAB308")),
    "consulting": PalettePreset("Consulting Blue", "#005EB8", "#F3C13A", ("#FFCC00", "#FFD700")),
    "strategy": PalettePreset("Strategy Teal", "#00457C", "#00A3E0", ("#0097A7", "#4DD0E1")),
    "data": PalettePreset("Data Indigo", "#2E3192", "#29ABE2", ("#00BFFF", "#87CEEB")),
}

DEFAULT_CONTEXT = "corporate"

# Declaration order breaks score ties.
CONTEXT_KEYWORDS: Dict[str, List[Tuple[re.Pattern, int]]] = {
    "tech": [
        (re.compile(r"\b(tech|technology|software|ai|artificial intelligence|machine learning|digital|cloud|api|platform|app|devops|cyber|blockchain)\b", re.I), 3),
        (re.compile(r"\b(innovation|startup|tech stack|programming|code|algorithm)\b", re.I), 2),
    ],
    "finance": [
        (re.compile(r"\b(finance|financial|revenue|profit|investment|market|trading|banking|fintech|stocks|crypto|portfolio|audit)\b", re.I), 3),
        (re.compile(r"\b(economy|budget|forecast|valuation|merger|acquisition|ipo)\b", re.I), 2),
    ],
    "creative": [
        (re.compile(r"\b(creative|design|brand|marketing|campaign|content|media|advertising|ux|ui|graphic|art|photography|video)\b", re.I), 3),
        (re.compile(r"\b(storytelling|visual|concept|idea|brainstorm)\b", re.I), 2),
    ],
    "energy": [
        (re.compile(r"\b(energy|power|oil|gas|renewable|solar|wind|battery|electric|ev)\b", re.I), 3),
        (re.compile(r"\b(grid|utility|fossil fuel|carbon capture|momentum|accelerate)\b", re.I), 2),
    ],
    "healthcare": [
        (re.compile(r"\b(health|healthcare|medical|patient|care|wellness|pharma|biotech|hospital|doctor|medicine|telehealth)\b", re.I), 3),
        (re.compile(r"\b(clinical|trial|drug|therapy|diagnostics|epidemic|pandemic)\b", re.I), 2),
    ],
    "sustainability": [
        (re.compile(r"\b(sustain|sustainability|green|eco|environment|carbon|climate|esg|recycle|circular economy)\b", re.I), 3),
        (re.compile(r"\b(net zero|emissions|conservation|biodiversity)\b", re.I), 2),
    ],
    "corporate": [
        (re.compile(r"\b(corporate|business|enterprise|management|operations|hr|leadership|team|organization)\b", re.I), 3),
        (re.compile(r"\b(policy|governance|compliance|risk management|board|executive)\b", re.I), 2),
    ],
    "luxury": [
        (re.compile(r"\b(luxury|premium|high-end|exclusive|fashion|jewelry|watches|hospitality)\b", re.I), 3),
        (re.compile(r"\b(elegant|sophisticated|elite|bespoke|couture)\b", re.I), 2),
    ],
    "consulting": [
        (re.compile(r"\b(consulting|strategy consulting|management consulting|mckinsey|bcg|bain)\b", re.I), 4),
    ],
    "strategy": [
        (re.compile(r"\b(strategy|strategic|planning|roadmap|vision|mission|goals|objectives)\b", re.I), 3),
    ],
    "data": [
        (re.compile(r"\b(data|analytics|bi|business intelligence|big data|insights|metrics|kpi|dashboard|visualization)\b", re.I), 3),
    ],
}


def score_contexts(prompt: str) -> Dict[str, int]:
    text = prompt or ""
    return {
        context: sum(weight for pattern, weight in patterns if pattern.search(text))
        for context, patterns in CONTEXT_KEYWORDS.items()
    }


def select_context(prompt: str) -> str:
    best, best_score = DEFAULT_CONTEXT, 0
    for context, score in score_contexts(prompt).items():
        if score > best_score:
            best, best_score = context, score
    return best


def select_palette_by_context(prompt: str) -> PalettePreset:
    """Pick the preset whose keyword dictionary scores highest for ``prompt``."""
    return PALETTE_PRESETS[select_context(prompt)]


@dataclass(frozen=True)
class GeneratedPalette:
    name: str
    primary: str
    accent: str
    neutral: Tuple[str, ...] = field(default_factory=tuple)
    contrast_primary_background: float = 0.0
    contrast_accent_background: float = 0.0
    accessible: bool = False

    def as_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "primary": self.primary,
            "accent": self.accent,
            "neutral": list(self.neutral),
            "contrastPrimaryBackground": round(self.contrast_primary_background, 2),
            "contrastAccentBackground": round(self.contrast_accent_background, 2),
            "accessible": self.accessible,
        }


def generate_palette(prompt: str, *, background: Optional[str] = None) -> GeneratedPalette:
    """Build a full palette for ``prompt``: preset, neutral ramp, repaired accent."""
    preset = select_palette_by_context(prompt)
    neutral = generate_neutral_ramp()
    bg = background or neutral[-1]

    if contrast_ratio(neutral[0], bg) < 7:
        neutral[0] = adjust_color(neutral[0], -0.20)

    accent = ensure_accessible_accent(preset.primary, preset.accent, preset.fallback_accents, bg)
    primary_bg = contrast_ratio(preset.primary, bg)
    accent_bg = contrast_ratio(accent, bg)
    return GeneratedPalette(
        name=preset.name,
        primary=preset.primary,
        accent=accent,
        neutral=tuple(neutral),
        contrast_primary_background=primary_bg,
        contrast_accent_background=accent_bg,
        accessible=primary_bg >= 7 and accent_bg >= 4.5,
    )
