"""Custom exceptions for slide spec validation and rendering."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class SlideforgeError(Exception):
    """Base class for every error raised by slideforge."""


class SpecValidationError(SlideforgeError, ValueError):
    """Raised when an input JSON spec is structurally invalid for rendering."""

    def __init__(self, issues: list[str]):
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid slide spec"]
        super().__init__(self._format())

    def _format(self) -> str:
        lines = ["Slide spec validation failed:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)


class AssetFetchError(SlideforgeError):
    """Raised when an external asset cannot be retrieved.

    ``permanent`` marks failures that must not be retried (4xx responses,
    non-image payloads).
    """

    def __init__(self, url: str, message: str, *, status: Optional[int] = None, permanent: bool = False):
        self.url = url
        self.status = status
        self.permanent = permanent
        super().__init__(f"{message} ({url})")


class TotalRenderFailure(SlideforgeError):
    """Raised when every rendering stage failed.

    Carries the last stage's exception and the full metrics trail so callers
    can report which stages were attempted and how long each took.
    """

    def __init__(self, last_error: Optional[BaseException], metrics: Sequence[Any]):
        self.last_error = last_error
        self.metrics = list(metrics)
        super().__init__(self._format())

    def _format(self) -> str:
        stages = ", ".join(
            f"{m.stage}={'ok' if m.success else 'failed'} ({m.duration_ms:.1f}ms)" for m in self.metrics
        )
        return f"All rendering stages failed. Last error: {self.last_error!s}. Stages: [{stages}]"
