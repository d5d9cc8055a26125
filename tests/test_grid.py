from __future__ import annotations

import sys
from pathlib import Path

import pytest

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from slideforge.grid import compute_grid, layout_regions, px_to_in, region_rect  # noqa: E402
from slideforge.spec import Grid, Margin, Region, SlideSpec  # noqa: E402


def test_px_conversion() -> None:
    assert px_to_in(96) == pytest.approx(1.0)
    assert px_to_in(12) == pytest.approx(0.125)


def test_header_region_geometry() -> None:
    grid = Grid(rows=6, cols=12, gutter=12, margin=Margin(20, 20, 20, 20))
    calc = compute_grid(grid, (10.0, 5.625))
    rect = region_rect(Region("header", 1, 1, 2, 12), calc)

    assert rect.x == pytest.approx(0.208, abs=0.005)
    assert rect.y == pytest.approx(0.208, abs=0.005)
    assert rect.w == pytest.approx(9.58, abs=0.01)
    # Two rows plus the gutter between them.
    assert rect.h == pytest.approx(2 * calc.row_height + calc.gutter)
    assert rect.h == pytest.approx(1.653, abs=0.005)


@pytest.mark.parametrize("dims", [(10.0, 5.625), (10.0, 7.5)])
@pytest.mark.parametrize(
    "grid",
    [
        Grid(rows=1, cols=1, gutter=0, margin=Margin(0, 0, 0, 0)),
        Grid(rows=8, cols=12, gutter=12, margin=Margin(40, 40, 40, 40)),
        Grid(rows=6, cols=4, gutter=30, margin=Margin(10, 80, 25, 5)),
    ],
)
def test_regions_inside_grid_stay_on_slide(grid: Grid, dims: tuple) -> None:
    calc = compute_grid(grid, dims)
    width, height = dims
    for row in range(1, grid.rows + 1):
        for col in range(1, grid.cols + 1):
            region = Region("r", row, col, grid.rows - row + 1, grid.cols - col + 1)
            rect = region_rect(region, calc)
            assert rect.x >= 0 and rect.y >= 0
            assert rect.right <= width + 1e-9
            assert rect.bottom <= height + 1e-9


def test_oversized_margins_clamp_to_zero() -> None:
    calc = compute_grid(Grid(rows=2, cols=2, gutter=12, margin=Margin(600, 600, 600, 600)), (10.0, 5.625))
    assert calc.inner_width == 0
    assert calc.inner_height == 0
    assert calc.col_width == 0
    assert calc.row_height == 0


def test_span_outside_grid_does_not_raise() -> None:
    calc = compute_grid(Grid(rows=2, cols=2), (10.0, 5.625))
    rect = region_rect(Region("wide", 1, 1, 5, 5), calc)
    assert rect.w > calc.inner_width


def test_layout_regions_first_declaration_wins() -> None:
    spec = SlideSpec.from_dict(
        {
            "layout": {
                "regions": [
                    {"name": "a", "rowStart": 1, "colStart": 1, "rowSpan": 1, "colSpan": 1},
                    {"name": "b", "rowStart": 2, "colStart": 1, "rowSpan": 1, "colSpan": 1},
                    {"name": "a", "rowStart": 5, "colStart": 5, "rowSpan": 1, "colSpan": 1},
                ]
            }
        }
    )
    rects = layout_regions(spec)
    assert list(rects) == ["a", "b"]
    assert rects["a"].y < rects["b"].y
