"""Concrete rendering stages, most capable first.

Every stage appends exactly one slide to the shared presentation. A stage
that fails part-way removes its slide before re-raising, so the next stage
starts from the same deck it would have seen.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pptx import Presentation

from .assets import AssetLoader
from .canvas import PptxCanvas, remove_slide
from .grid import Rect
from .orchestrator import Stage
from .planner import TextRun, plan_slide
from .spec import SlideSpec
from .typography import truncate_with_ellipsis

logger = logging.getLogger(__name__)


class SlideStage:
    """Base for stages that draw onto one new slide of ``presentation``."""

    name = "base"

    def __init__(self, presentation: Presentation):
        self.presentation = presentation

    def __call__(self, spec: SlideSpec):
        canvas = PptxCanvas.add_to(self.presentation)
        try:
            self.draw(canvas, spec)
        except Exception:
            logger.debug("Stage %r failed; removing its partial slide", self.name)
            remove_slide(self.presentation, canvas.slide)
            raise
        return canvas.slide

    def draw(self, canvas: PptxCanvas, spec: SlideSpec) -> None:
        raise NotImplementedError

    def as_stage(self) -> Stage:
        return Stage(self.name, self)


class GridStage(SlideStage):
    """Full grid layout: fitted text, callout cards, charts and remote images."""

    name = "grid"

    def __init__(self, presentation: Presentation, loader: Optional[AssetLoader] = None):
        super().__init__(presentation)
        self.loader = loader

    def _image_bytes(self, url: str) -> Optional[bytes]:
        if self.loader is None:
            return None
        asset = self.loader.load(url)
        return asset.data if asset is not None else None

    def draw(self, canvas: PptxCanvas, spec: SlideSpec) -> None:
        plan = plan_slide(spec, remote_images=self.loader is not None)
        canvas.draw(plan, self._image_bytes)


class LayoutStage(SlideStage):
    """Same grid layout with every image drawn as a placeholder."""

    name = "layout"

    def draw(self, canvas: PptxCanvas, spec: SlideSpec) -> None:
        plan = plan_slide(spec, remote_images=False, accent_bar=False)
        canvas.draw(plan)


class MinimalStage(SlideStage):
    """Title, subtitle and first bullet group at fixed positions.

    No grid, no charts, no network. This is the stage of last resort.
    """

    name = "minimal"

    MARGIN = 0.5
    TITLE_PT = 44
    SUBTITLE_PT = 24
    BODY_PT = 18

    def draw(self, canvas: PptxCanvas, spec: SlideSpec) -> None:
        width, height = spec.dimensions
        inner_w = width - 2 * self.MARGIN
        canvas.set_background("#FFFFFF")
        content = spec.content

        if content.title and content.title.text:
            rect = Rect(self.MARGIN, 0.5, inner_w, 1.0)
            text = truncate_with_ellipsis(content.title.text, rect.w, rect.h, self.TITLE_PT)
            canvas.place_text(rect, (TextRun(text, self.TITLE_PT, "#000000", bold=True),))

        if content.subtitle and content.subtitle.text:
            rect = Rect(self.MARGIN, 1.7, inner_w, 0.6)
            text = truncate_with_ellipsis(content.subtitle.text, rect.w, rect.h, self.SUBTITLE_PT)
            canvas.place_text(rect, (TextRun(text, self.SUBTITLE_PT, "#666666"),))

        group = content.bullet_groups[0] if content.bullet_groups else None
        if group and group.items:
            rect = Rect(self.MARGIN, 2.5, inner_w, max(0.5, min(4.0, height - 2.5 - self.MARGIN)))
            runs = [
                TextRun(item.text, self.BODY_PT, "#000000", level=max(0, item.level - 1)) for item in group.items
            ]
            canvas.place_text(rect, runs, bullets=True)


STAGE_NAMES = ("grid", "layout", "minimal")


def default_stages(
    presentation: Presentation,
    loader: Optional[AssetLoader] = None,
    names: Optional[Sequence[str]] = None,
) -> List[Stage]:
    """Build the stage chain in fallback order, optionally restricted to ``names``."""
    available = {
        "grid": GridStage(presentation, loader),
        "layout": LayoutStage(presentation),
        "minimal": MinimalStage(presentation),
    }
    selected = list(names) if names else list(STAGE_NAMES)
    unknown = [n for n in selected if n not in available]
    if unknown:
        raise ValueError(f"Unknown stage(s): {', '.join(unknown)} (available: {', '.join(STAGE_NAMES)})")
    return [available[n].as_stage() for n in selected]
