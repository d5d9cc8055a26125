"""Slide builder - renders one PPTX slide from a JSON slide spec.

Lays the slide spec's content out on its grid, fits text, repairs inaccessible
colors and falls back through progressively simpler rendering stages until
one succeeds.
"""

from __future__ import annotations

from slideforge.cli import run_cli


def main() -> None:
    run_cli()


if __name__ == "__main__":
    main()
