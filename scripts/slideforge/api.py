"""Public API helpers for programmatic slide rendering."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from pptx import Presentation

from .assets import AssetLoader, fetch_asset
from .cache import AssetCache, DEFAULT_MAX_ENTRIES, InsertionOrderEviction, LRUEviction
from .canvas import new_presentation
from .orchestrator import RenderOrchestrator, RenderResult
from .spec import SlideSpec
from .strategies import STAGE_NAMES, default_stages
from .validation import validate_spec, validate_spec_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderSettings:
    stages: Tuple[str, ...] = STAGE_NAMES
    network: bool = True
    cache_size: int = DEFAULT_MAX_ENTRIES
    lru_cache: bool = False
    retries: int = 3
    base_timeout: float = 5.0
    base_delay: float = 0.2

    def build_loader(self) -> Optional[AssetLoader]:
        if not self.network:
            return None
        eviction = LRUEviction() if self.lru_cache else InsertionOrderEviction()
        cache = AssetCache(self.cache_size, eviction)

        def fetch(url: str):
            return fetch_asset(url, max_retries=self.retries, base_timeout=self.base_timeout, base_delay=self.base_delay)

        return AssetLoader(cache, fetch=fetch)


def render_spec(
    spec: Union[SlideSpec, Dict[str, Any]],
    *,
    presentation: Optional[Presentation] = None,
    settings: Optional[RenderSettings] = None,
    loader: Optional[AssetLoader] = None,
    stage_names: Optional[Sequence[str]] = None,
) -> Tuple[Presentation, RenderResult]:
    """Render one slide for ``spec`` and return the deck and the stage result.

    A dict is validated first. Pass ``presentation`` to append to an existing
    deck and ``loader`` to share an asset cache across calls.
    """
    if isinstance(spec, dict):
        spec = validate_spec(spec)
    settings = settings or RenderSettings()
    prs = presentation if presentation is not None else new_presentation(spec.dimensions)
    if loader is None:
        loader = settings.build_loader()

    stages = default_stages(prs, loader, stage_names or settings.stages)
    result = RenderOrchestrator(stages).render(spec)
    logger.info("Rendered slide with stage %r in %.1fms", result.stage, result.total_duration_ms)
    return prs, result


def render_spec_file(
    spec_path: Path,
    output_path: Path,
    *,
    settings: Optional[RenderSettings] = None,
    loader: Optional[AssetLoader] = None,
) -> Tuple[Path, RenderResult]:
    """Validate ``spec_path``, render it and save the PPTX to ``output_path``."""
    spec = validate_spec_file(spec_path)
    prs, result = render_spec(spec, settings=settings, loader=loader)
    return save_presentation(prs, output_path), result


def save_presentation(prs: Presentation, output_path: Path) -> Path:
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    prs.save(str(output))
    return output


def write_spec(spec: Dict[str, Any], path: Path) -> Path:
    """Write a JSON spec to disk and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(spec, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
