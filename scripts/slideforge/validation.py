"""Structural validation for the slide spec JSON input.

Only problems that would make rendering meaningless are reported. Anchors
that point at unknown content ids or undeclared regions are tolerated;
the layout engine skips them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .errors import SpecValidationError
from .spec import ASPECT_RATIOS, SlideSpec, is_hex6


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_meta(meta: Any, issues: list[str]) -> None:
    if meta is None:
        return
    if not isinstance(meta, dict):
        issues.append("meta must be an object when provided")
        return
    ratio = meta.get("aspectRatio")
    if ratio is not None and ratio not in ASPECT_RATIOS:
        allowed = ", ".join(sorted(ASPECT_RATIOS))
        issues.append(f"meta.aspectRatio '{ratio}' is unsupported (supported: {allowed})")


def _check_content(content: Any, issues: list[str]) -> None:
    if not isinstance(content, dict):
        issues.append("content is required and must be an object")
        return

    title = content.get("title")
    if not isinstance(title, dict) or not _is_non_empty_str(title.get("text")):
        issues.append("content.title is required and must have non-empty text")
    elif not _is_non_empty_str(title.get("id")):
        issues.append("content.title.id must be a non-empty string")

    subtitle = content.get("subtitle")
    if subtitle is not None and not isinstance(subtitle, dict):
        issues.append("content.subtitle must be an object when provided")

    for key in ("bullets", "callouts", "images", "imagePlaceholders"):
        value = content.get(key)
        if value is None:
            continue
        if not isinstance(value, list):
            issues.append(f"content.{key} must be a list when provided")
            continue
        for idx, item in enumerate(value):
            if not isinstance(item, dict) or not _is_non_empty_str(item.get("id")):
                issues.append(f"content.{key}[{idx}] must be an object with a non-empty id")

    viz = content.get("dataViz")
    if viz is not None:
        if not isinstance(viz, dict):
            issues.append("content.dataViz must be an object when provided")
            return
        series = viz.get("series")
        if series is not None and not isinstance(series, list):
            issues.append("content.dataViz.series must be a list when provided")
        elif isinstance(series, list):
            for s_idx, item in enumerate(series):
                sp = f"content.dataViz.series[{s_idx}]"
                if not isinstance(item, dict):
                    issues.append(f"{sp} must be an object with name + values")
                    continue
                values = item.get("values")
                if not isinstance(values, list) or not all(_is_number(v) for v in values):
                    issues.append(f"{sp}.values must be a list of numbers")


def _check_grid(grid: Any, issues: list[str]) -> None:
    if grid is None:
        return
    if not isinstance(grid, dict):
        issues.append("layout.grid must be an object when provided")
        return
    for field in ("rows", "cols"):
        value = grid.get(field)
        if value is not None and (not _is_int(value) or value < 1):
            issues.append(f"layout.grid.{field} must be a positive integer")
    gutter = grid.get("gutter")
    if gutter is not None and (not _is_number(gutter) or gutter < 0):
        issues.append("layout.grid.gutter must be a non-negative number")
    margin = grid.get("margin")
    if margin is not None:
        if not isinstance(margin, dict):
            issues.append("layout.grid.margin must be an object when provided")
        else:
            for side in ("t", "r", "b", "l"):
                if side in margin and not _is_number(margin[side]):
                    issues.append(f"layout.grid.margin.{side} must be a number")


def _check_layout(layout: Any, issues: list[str]) -> None:
    if not isinstance(layout, dict):
        issues.append("layout is required and must be an object")
        return
    _check_grid(layout.get("grid"), issues)

    regions = layout.get("regions")
    if not isinstance(regions, list):
        issues.append("layout.regions is required and must be a list")
    else:
        for idx, region in enumerate(regions):
            prefix = f"layout.regions[{idx}]"
            if not isinstance(region, dict) or not _is_non_empty_str(region.get("name")):
                issues.append(f"{prefix} must be an object with a non-empty name")
                continue
            for field in ("rowStart", "colStart", "rowSpan", "colSpan"):
                value = region.get(field)
                if not _is_int(value) or value < 1:
                    issues.append(f"{prefix}.{field} must be a positive integer")

    anchors = layout.get("anchors")
    if not isinstance(anchors, list):
        issues.append("layout.anchors is required and must be a list")
        return
    for idx, anchor in enumerate(anchors):
        prefix = f"layout.anchors[{idx}]"
        if not isinstance(anchor, dict):
            issues.append(f"{prefix} must be an object")
            continue
        for field in ("refId", "region"):
            if not _is_non_empty_str(anchor.get(field)):
                issues.append(f"{prefix}.{field} must be a non-empty string")
        if "order" in anchor and not _is_int(anchor.get("order")):
            issues.append(f"{prefix}.order must be an integer when provided")


def _check_style_tokens(tokens: Any, issues: list[str]) -> None:
    if tokens is None:
        return
    if not isinstance(tokens, dict):
        issues.append("styleTokens must be an object when provided")
        return
    palette = tokens.get("palette")
    if palette is None:
        return
    if not isinstance(palette, dict):
        issues.append("styleTokens.palette must be an object when provided")
        return
    for field in ("primary", "accent"):
        if field in palette and not is_hex6(palette[field]):
            issues.append(f"styleTokens.palette.{field} must be a #RRGGBB color")
    neutral = palette.get("neutral")
    if neutral is not None and not isinstance(neutral, list):
        issues.append("styleTokens.palette.neutral must be a list when provided")


def validate_spec(data: Dict[str, Any]) -> SlideSpec:
    """Validate a spec dict, collecting every issue, and return the parsed spec."""
    if not isinstance(data, dict):
        raise SpecValidationError(["Root JSON value must be an object"])

    issues: list[str] = []
    _check_meta(data.get("meta"), issues)
    _check_content(data.get("content"), issues)
    _check_layout(data.get("layout"), issues)
    _check_style_tokens(data.get("styleTokens"), issues)

    if issues:
        raise SpecValidationError(issues)

    return SlideSpec.from_dict(data)


def load_spec_file(spec_path: Path) -> Dict[str, Any]:
    try:
        raw = spec_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SpecValidationError([f"Spec file not found: {spec_path}"]) from exc

    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SpecValidationError([f"Invalid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}"]) from exc


def validate_spec_file(spec_path: Path) -> SlideSpec:
    """Load and validate a JSON spec file."""
    return validate_spec(load_spec_file(spec_path))
