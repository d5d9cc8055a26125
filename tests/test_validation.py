from __future__ import annotations

import copy
import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SCRIPT_DIR = ROOT / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from slideforge.errors import SpecValidationError  # noqa: E402
from slideforge.validation import validate_spec, validate_spec_file  # noqa: E402

SAMPLE = ROOT / "assets" / "sample_spec.json"


@pytest.fixture
def sample() -> dict:
    return json.loads(SAMPLE.read_text(encoding="utf-8"))


def test_sample_spec_passes() -> None:
    spec = validate_spec_file(SAMPLE)
    assert spec.content.title.text.startswith("Grow")
    assert spec.meta.aspect_ratio == "16:9"
    assert len(spec.layout.anchors) == 5


def test_missing_title_is_reported(sample: dict) -> None:
    del sample["content"]["title"]
    with pytest.raises(SpecValidationError) as exc:
        validate_spec(sample)
    assert "content.title is required" in str(exc.value)


def test_non_positive_grid_rows_rejected(sample: dict) -> None:
    sample["layout"]["grid"]["rows"] = 0
    with pytest.raises(SpecValidationError) as exc:
        validate_spec(sample)
    assert exc.value.issues == ["layout.grid.rows must be a positive integer"]


def test_unknown_aspect_ratio_rejected(sample: dict) -> None:
    sample["meta"]["aspectRatio"] = "21:9"
    with pytest.raises(SpecValidationError, match="aspectRatio"):
        validate_spec(sample)


def test_dangling_references_are_not_errors(sample: dict) -> None:
    sample["layout"]["anchors"].append({"refId": "ghost", "region": "body", "order": 9})
    sample["layout"]["anchors"].append({"refId": "c1", "region": "sidebar", "order": 10})
    spec = validate_spec(sample)
    assert spec.content.resolve("ghost") is None


def test_all_issues_collected_in_one_error(sample: dict) -> None:
    bad = copy.deepcopy(sample)
    bad["layout"]["grid"]["cols"] = -1
    bad["layout"]["regions"][0]["rowSpan"] = 0
    bad["styleTokens"]["palette"]["primary"] = "blue"
    bad["content"]["dataViz"]["series"][0]["values"] = [1, "two"]

    with pytest.raises(SpecValidationError) as exc:
        validate_spec(bad)

    issues = exc.value.issues
    assert len(issues) == 4
    message = str(exc.value)
    assert message.startswith("Slide spec validation failed:")
    assert "- layout.grid.cols must be a positive integer" in message
    assert "layout.regions[0].rowSpan" in message
    assert "styleTokens.palette.primary" in message
    assert "content.dataViz.series[0].values" in message


def test_root_must_be_object() -> None:
    with pytest.raises(SpecValidationError, match="Root JSON value must be an object"):
        validate_spec([1, 2, 3])  # type: ignore[arg-type]


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SpecValidationError, match="Spec file not found"):
        validate_spec_file(tmp_path / "nope.json")


def test_invalid_json_reports_position(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{\n  "content": ,\n}', encoding="utf-8")
    with pytest.raises(SpecValidationError) as exc:
        validate_spec_file(path)
    assert "Invalid JSON at line 2" in str(exc.value)
