"""Grid layout, text fitting, color contrast and staged PPTX rendering for slide specs."""

from .api import RenderSettings, render_spec, render_spec_file, save_presentation, write_spec
from .assets import AssetLoader, fetch_asset, optimize_image
from .cache import AssetCache, InsertionOrderEviction, LRUEviction, cache_key
from .cli import run_cli
from .color import contrast_ratio, ensure_accessible_accent, generate_neutral_ramp, select_palette_by_context
from .errors import AssetFetchError, SlideforgeError, SpecValidationError, TotalRenderFailure
from .fallback_spec import create_fallback_spec
from .grid import compute_grid, flow_anchors, region_rect
from .orchestrator import RenderOrchestrator, RenderResult, Stage, StageMetric, first_success
from .planner import plan_slide
from .spec import SlideSpec
from .strategies import default_stages
from .typography import calculate_optimal_font_size, truncate_with_ellipsis
from .validation import validate_spec, validate_spec_file

__all__ = [
    "AssetCache",
    "AssetFetchError",
    "AssetLoader",
    "InsertionOrderEviction",
    "LRUEviction",
    "RenderOrchestrator",
    "RenderResult",
    "RenderSettings",
    "SlideSpec",
    "SlideforgeError",
    "SpecValidationError",
    "Stage",
    "StageMetric",
    "TotalRenderFailure",
    "cache_key",
    "calculate_optimal_font_size",
    "compute_grid",
    "contrast_ratio",
    "create_fallback_spec",
    "default_stages",
    "ensure_accessible_accent",
    "fetch_asset",
    "first_success",
    "flow_anchors",
    "generate_neutral_ramp",
    "optimize_image",
    "plan_slide",
    "region_rect",
    "render_spec",
    "render_spec_file",
    "run_cli",
    "save_presentation",
    "select_palette_by_context",
    "truncate_with_ellipsis",
    "validate_spec",
    "validate_spec_file",
    "write_spec",
]
