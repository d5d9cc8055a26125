"""Drawing primitives over python-pptx.

``PptxCanvas`` wraps one slide. Positions and sizes come in as inch
``Rect`` values; colors as ``#RRGGBB`` strings.
"""

from __future__ import annotations

import io
import logging
from typing import Callable, Optional, Sequence, Tuple

from pptx import Presentation
from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE
from pptx.enum.text import MSO_ANCHOR, MSO_AUTO_SIZE, PP_ALIGN
from pptx.util import Inches, Pt

from .color import hex_to_rgb
from .grid import Rect
from .planner import DrawInstruction, InstructionKind, SlidePlan, TextRun
from .spec import Chart

logger = logging.getLogger(__name__)

CHART_TYPES = {
    "bar": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "column": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "line": XL_CHART_TYPE.LINE_MARKERS,
    "pie": XL_CHART_TYPE.PIE,
    "doughnut": XL_CHART_TYPE.DOUGHNUT,
    "donut": XL_CHART_TYPE.DOUGHNUT,
    "area": XL_CHART_TYPE.AREA,
    "radar": XL_CHART_TYPE.RADAR,
}

_NO_AXES = {"pie", "doughnut", "donut"}
_LINE_KINDS = {"line", "radar"}

# Image bytes for a URL, or None when the asset could not be obtained.
ImageSource = Callable[[str], Optional[bytes]]


def rgb(value: str) -> RGBColor:
    return RGBColor(*hex_to_rgb(value))


def new_presentation(slide_dims: Tuple[float, float]) -> Presentation:
    prs = Presentation()
    prs.slide_width = Inches(slide_dims[0])
    prs.slide_height = Inches(slide_dims[1])
    return prs


def blank_layout(prs: Presentation):
    blank = next((layout for layout in prs.slide_layouts if layout.name.strip().lower() == "blank"), None)
    if blank is not None:
        return blank
    try:
        return prs.slide_layouts[6]
    except IndexError:
        return prs.slide_layouts[-1]


def remove_slide(prs: Presentation, slide) -> None:
    # python-pptx has no public delete API; drop the relationship and the id entry.
    slide_id_list = prs.slides._sldIdLst  # type: ignore[attr-defined]
    for slide_id in list(slide_id_list):
        if prs.part.related_part(slide_id.rId) is slide.part:
            prs.part.drop_rel(slide_id.rId)
            slide_id_list.remove(slide_id)
            return


def contain_geometry(image_size: Tuple[int, int], rect: Rect) -> Rect:
    """Largest rect with the image's aspect ratio centered inside ``rect``."""
    iw, ih = image_size
    if rect.w <= 0 or rect.h <= 0 or iw <= 0 or ih <= 0:
        return rect
    ratio = iw / ih
    if ratio >= rect.w / rect.h:
        w, h = rect.w, rect.w / ratio
    else:
        w, h = rect.h * ratio, rect.h
    return Rect(rect.x + (rect.w - w) / 2, rect.y + (rect.h - h) / 2, w, h)


def _image_size(data: bytes) -> Tuple[int, int]:
    from PIL import Image

    with Image.open(io.BytesIO(data)) as im:
        return im.size


class PptxCanvas:
    def __init__(self, slide):
        self.slide = slide

    @classmethod
    def add_to(cls, prs: Presentation) -> "PptxCanvas":
        return cls(prs.slides.add_slide(blank_layout(prs)))

    def set_background(self, color: str) -> None:
        fill = self.slide.background.fill
        fill.solid()
        fill.fore_color.rgb = rgb(color)

    def place_shape(
        self,
        rect: Rect,
        *,
        fill: Optional[str] = None,
        line: Optional[str] = None,
        line_width: float = 0.0,
        rounded: bool = False,
    ):
        kind = MSO_AUTO_SHAPE_TYPE.ROUNDED_RECTANGLE if rounded else MSO_AUTO_SHAPE_TYPE.RECTANGLE
        shape = self.slide.shapes.add_shape(kind, Inches(rect.x), Inches(rect.y), Inches(rect.w), Inches(rect.h))
        shape.shadow.inherit = False
        if fill:
            shape.fill.solid()
            shape.fill.fore_color.rgb = rgb(fill)
        else:
            shape.fill.background()
        if line and line_width > 0:
            shape.line.color.rgb = rgb(line)
            shape.line.width = Pt(line_width)
        else:
            shape.line.fill.background()
        return shape

    def place_text(
        self,
        rect: Rect,
        runs: Sequence[TextRun],
        *,
        font_face: str = "Aptos",
        bullets: bool = False,
        align: PP_ALIGN = PP_ALIGN.LEFT,
        anchor: MSO_ANCHOR = MSO_ANCHOR.TOP,
    ):
        box = self.slide.shapes.add_textbox(Inches(rect.x), Inches(rect.y), Inches(rect.w), Inches(rect.h))
        tf = box.text_frame
        tf.word_wrap = True
        tf.auto_size = MSO_AUTO_SIZE.NONE
        tf.vertical_anchor = anchor
        tf.margin_left = tf.margin_right = Inches(0.05)
        tf.margin_top = tf.margin_bottom = Inches(0.03)

        for i, run in enumerate(runs):
            paragraph = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
            text = run.text
            if bullets and text and not text.lstrip().startswith("•"):
                text = f"• {text}"
            paragraph.text = text
            paragraph.level = run.level
            paragraph.alignment = align
            paragraph.font.name = font_face
            paragraph.font.size = Pt(run.font_size)
            paragraph.font.bold = run.bold
            paragraph.font.color.rgb = rgb(run.color)
            if bullets:
                paragraph.space_after = Pt(6)
        return box

    def place_image(self, rect: Rect, data: bytes):
        """Add ``data`` scaled to fit inside ``rect`` without cropping."""
        target = contain_geometry(_image_size(data), rect)
        return self.slide.shapes.add_picture(
            io.BytesIO(data), Inches(target.x), Inches(target.y), width=Inches(target.w), height=Inches(target.h)
        )

    def place_chart(
        self,
        rect: Rect,
        chart: Chart,
        *,
        colors: Sequence[str] = (),
        number_format: Optional[str] = None,
        font_face: str = "Aptos",
    ):
        chart_type = CHART_TYPES.get(chart.chart_type)
        if chart_type is None:
            raise ValueError(f"Unsupported chart kind: {chart.chart_type!r}")

        labels = list(chart.labels)
        if not labels and chart.series:
            labels = [f"Item {i + 1}" for i in range(len(chart.series[0].values))]

        chart_data = CategoryChartData()
        chart_data.categories = labels
        for series in chart.series:
            values = list(series.values[: len(labels)])
            values.extend([0.0] * (len(labels) - len(values)))
            chart_data.add_series(series.name, values)

        frame = self.slide.shapes.add_chart(
            chart_type, Inches(rect.x), Inches(rect.y), Inches(rect.w), Inches(rect.h), chart_data
        )
        out = frame.chart
        out.font.name = font_face
        out.font.size = Pt(10)

        if chart.title:
            out.has_title = True
            out.chart_title.text_frame.text = chart.title
        else:
            out.has_title = False

        no_axes = chart.chart_type in _NO_AXES
        out.has_legend = no_axes or len(chart.series) > 1
        if out.has_legend:
            out.legend.position = XL_LEGEND_POSITION.BOTTOM
            out.legend.include_in_layout = False

        if colors and not no_axes:
            for i, series in enumerate(out.plots[0].series):
                color = rgb(colors[i % len(colors)])
                if chart.chart_type in _LINE_KINDS:
                    series.format.line.color.rgb = color
                else:
                    series.format.fill.solid()
                    series.format.fill.fore_color.rgb = color

        if number_format:
            plot = out.plots[0]
            plot.has_data_labels = True
            plot.data_labels.number_format = number_format
            plot.data_labels.number_format_is_linked = False
            if not no_axes:
                out.value_axis.tick_labels.number_format = number_format
                out.value_axis.tick_labels.number_format_is_linked = False
        return frame

    def draw(self, plan: SlidePlan, images: Optional[ImageSource] = None) -> None:
        """Paint ``plan`` in order. Images that cannot be loaded become placeholders."""
        self.set_background(plan.background)
        for instruction in plan.instructions:
            self._draw_one(instruction, images)

    def _draw_one(self, ins: DrawInstruction, images: Optional[ImageSource]) -> None:
        if ins.kind == InstructionKind.TEXT:
            self.place_text(ins.rect, ins.runs, font_face=ins.font_face, bullets=ins.bullets)
        elif ins.kind == InstructionKind.SHAPE:
            self.place_shape(ins.rect, fill=ins.fill, line=ins.line, line_width=ins.line_width, rounded=ins.rounded)
        elif ins.kind == InstructionKind.CHART:
            assert ins.chart is not None
            self.place_chart(
                ins.rect, ins.chart, colors=ins.chart_colors, number_format=ins.number_format, font_face=ins.font_face
            )
        elif ins.kind == InstructionKind.IMAGE:
            data = images(ins.image_url) if images and ins.image_url else None
            if data is not None:
                try:
                    self.place_image(ins.rect, data)
                    return
                except (OSError, ValueError) as exc:
                    logger.warning("Image %r could not be placed: %s", ins.ref_id, exc)
            logger.debug("No image data for %r; drawing placeholder", ins.ref_id)
            self._placeholder(ins.rect, ins.alt or "Image", fill="#E2E8F0", color="#475569", font_face=ins.font_face)
        elif ins.kind == InstructionKind.PLACEHOLDER:
            run = ins.runs[0] if ins.runs else None
            self._placeholder(
                ins.rect,
                run.text if run else ins.alt,
                fill=ins.fill or "#E2E8F0",
                color=run.color if run else "#475569",
                font_face=ins.font_face,
            )
        else:
            raise ValueError(f"Unknown instruction kind: {ins.kind!r}")

    def _placeholder(self, rect: Rect, label: str, *, fill: str, color: str, font_face: str) -> None:
        self.place_shape(rect, fill=fill, rounded=True)
        if label:
            self.place_text(
                rect,
                (TextRun(label, 14, color),),
                font_face=font_face,
                align=PP_ALIGN.CENTER,
                anchor=MSO_ANCHOR.MIDDLE,
            )
