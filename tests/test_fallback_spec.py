from __future__ import annotations

import sys
from pathlib import Path

import pytest

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from slideforge.fallback_spec import (  # noqa: E402
    ACTION_VERBS,
    DEFAULT_TITLE,
    create_fallback_spec,
    ensure_action_verb,
    fallback_spec_dict,
)
from slideforge.validation import validate_spec  # noqa: E402


def test_existing_action_verb_is_kept() -> None:
    assert ensure_action_verb("improve onboarding") == "improve onboarding"


def test_missing_verb_is_added_deterministically() -> None:
    first = ensure_action_verb("Quarterly revenue review")
    assert first == ensure_action_verb("Quarterly revenue review")
    verb, rest = first.split(" ", 1)
    assert verb in ACTION_VERBS
    assert rest == "Quarterly revenue review"


def test_title_uses_first_eight_words() -> None:
    spec = create_fallback_spec("Launch the new partner program across every region this fiscal year please")
    assert spec.content.title.text == "Launch the new partner program across every region"


def test_empty_prompt_uses_default_title() -> None:
    spec = create_fallback_spec("")
    assert spec.content.title.text.endswith(DEFAULT_TITLE)


def test_fallback_dict_is_valid_and_uses_inch_margins() -> None:
    data = fallback_spec_dict("market entry")
    validate_spec(data)

    margin = data["layout"]["grid"]["margin"]
    assert margin["t"] == pytest.approx(57.6)
    assert margin["l"] == pytest.approx(86.4)
    assert data["styleTokens"]["palette"]["primary"] == "#005EB8"
    assert {r["name"] for r in data["layout"]["regions"]} == {"header", "body", "aside"}
