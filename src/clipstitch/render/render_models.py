"""Data structures shared across the render pipeline."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .render_errors import InvalidJobTransition

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..media.artifact_tracker import ArtifactTracker
    from .render_schemas import RenderRequest


class ArtifactKind(StrEnum):
    """Kinds of temporary files a job can create."""

    DOWNLOADED_CLIP = "downloaded-clip"
    RENDERED_OUTPUT = "rendered-output"


@dataclass(slots=True, frozen=True)
class TempArtifact:
    """A temporary file owned by exactly one job."""

    path: Path
    kind: ArtifactKind


@dataclass(slots=True, frozen=True)
class ResolvedClip:
    """Clip with a concrete trim window, ready for the renderer."""

    url: str
    start_time_ms: int
    end_time_ms: int
    source_url: str = ""

    @property
    def duration_ms(self) -> int:
        return self.end_time_ms - self.start_time_ms

    def to_props(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "startTimeMs": self.start_time_ms,
            "endTimeMs": self.end_time_ms,
        }


class JobState(StrEnum):
    """Lifecycle states of a render job."""

    VALIDATING = "validating"
    RESOLVING = "resolving"
    BUNDLE_READY = "bundle_ready"
    RENDERING = "rendering"
    STREAMING = "streaming"
    CLEANED = "cleaned"
    FAILED = "failed"


TERMINAL_STATES = frozenset({JobState.CLEANED, JobState.FAILED})

_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.VALIDATING: frozenset({JobState.RESOLVING, JobState.FAILED}),
    JobState.RESOLVING: frozenset({JobState.BUNDLE_READY, JobState.FAILED}),
    JobState.BUNDLE_READY: frozenset({JobState.RENDERING, JobState.FAILED}),
    JobState.RENDERING: frozenset({JobState.STREAMING, JobState.FAILED}),
    JobState.STREAMING: frozenset({JobState.CLEANED}),
    JobState.CLEANED: frozenset(),
    JobState.FAILED: frozenset(),
}


@dataclass(slots=True)
class RenderJob:
    """Unit of work for one render request.

    The job owns its :class:`ArtifactTracker`. Entering either terminal state
    releases every tracked artifact exactly once.
    """

    tracker: "ArtifactTracker"
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: JobState = JobState.VALIDATING
    request: "RenderRequest | None" = None
    clips: list[ResolvedClip] = field(default_factory=list)
    output_path: Path | None = None
    progress_percent: float = 0.0
    failure: str | None = None
    _released: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def succeeded(self) -> bool:
        return self.state is JobState.CLEANED

    def advance(self, target: JobState) -> None:
        if target in TERMINAL_STATES:
            raise InvalidJobTransition(f"use fail() or close() to reach {target}")
        self._move(target)

    def fail(self, exc: BaseException | None = None) -> None:
        """Mark the job failed and release its artifacts."""
        if self.state is JobState.FAILED:
            return
        self._move(JobState.FAILED)
        if exc is not None:
            self.failure = str(exc) or type(exc).__name__
        self._release()

    def close(self) -> None:
        """Finish streaming and release artifacts; no-op once terminal."""
        if self.is_terminal:
            return
        self._move(JobState.CLEANED)
        self._release()

    def _move(self, target: JobState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidJobTransition(f"job {self.job_id}: {self.state} -> {target} is not allowed")
        self.state = target

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        self.tracker.release_all()


__all__ = [
    "ArtifactKind",
    "JobState",
    "RenderJob",
    "ResolvedClip",
    "TERMINAL_STATES",
    "TempArtifact",
]
