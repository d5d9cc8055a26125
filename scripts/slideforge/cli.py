"""CLI orchestration for slide rendering."""

from __future__ import annotations

import argparse
import json
import logging
import traceback
from pathlib import Path
from typing import Optional, Sequence

from .api import RenderSettings, render_spec, save_presentation
from .color import generate_palette
from .errors import SpecValidationError
from .fallback_spec import create_fallback_spec
from .strategies import STAGE_NAMES
from .validation import validate_spec_file


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a PPTX slide from a JSON slide spec")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--spec", help="Path to JSON slide spec")
    source.add_argument(
        "--prompt",
        help="Render the default executive layout titled from this text instead of a spec file",
    )
    source.add_argument(
        "--palette-from-prompt",
        metavar="TEXT",
        help="Print the palette selected for TEXT as JSON and exit",
    )
    parser.add_argument("--output", help="Output PPTX file path (required unless --palette-from-prompt)")
    parser.add_argument(
        "--stages",
        default=",".join(STAGE_NAMES),
        help=f"Comma-separated stages to try in order (default: {','.join(STAGE_NAMES)})",
    )
    parser.add_argument("--no-network", action="store_true", help="Never fetch remote images; draw placeholders")
    parser.add_argument("--cache-size", type=int, default=100, help="Max cached image assets (default: 100)")
    parser.add_argument("--lru-cache", action="store_true", help="Evict least recently used assets first")
    parser.add_argument("--retries", type=int, default=3, help="Retries per image fetch (default: 3)")
    parser.add_argument("--metrics-out", default=None, help="Optional path to write stage metrics JSON")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show full traceback for unexpected errors",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.palette_from_prompt is not None:
        print(json.dumps(generate_palette(args.palette_from_prompt).as_dict(), indent=2))
        return

    if not args.output:
        parser.error("--output is required when rendering")

    try:
        stages = tuple(s.strip() for s in args.stages.split(",") if s.strip())
        settings = RenderSettings(
            stages=stages,
            network=not args.no_network,
            cache_size=args.cache_size,
            lru_cache=args.lru_cache,
            retries=args.retries,
        )
        spec = validate_spec_file(Path(args.spec).resolve()) if args.spec else create_fallback_spec(args.prompt)

        prs, result = render_spec(spec, settings=settings)
        saved = save_presentation(prs, Path(args.output).resolve())
        print(f"✅ PPTX saved to {saved} (stage: {result.stage})")

        if args.metrics_out:
            metrics_path = Path(args.metrics_out).resolve()
            metrics_path.parent.mkdir(parents=True, exist_ok=True)
            metrics_path.write_text(json.dumps(result.as_dict(), indent=2) + "\n", encoding="utf-8")
    except SpecValidationError as e:
        raise SystemExit(str(e)) from e
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        raise SystemExit(f"Slide rendering failed: {e}") from e
