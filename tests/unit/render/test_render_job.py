from __future__ import annotations

from pathlib import Path

import pytest

from clipstitch.media.artifact_tracker import ArtifactTracker
from clipstitch.render.render_errors import InvalidJobTransition
from clipstitch.render.render_models import ArtifactKind, JobState, RenderJob, ResolvedClip


class CountingTracker(ArtifactTracker):
    def __init__(self) -> None:
        super().__init__()
        self.releases = 0

    def release_all(self) -> int:
        self.releases += 1
        return super().release_all()


def _walk_to_streaming(job: RenderJob) -> None:
    for state in (JobState.RESOLVING, JobState.BUNDLE_READY, JobState.RENDERING, JobState.STREAMING):
        job.advance(state)


def test_happy_path_releases_once_on_close(tmp_path: Path) -> None:
    tracker = CountingTracker()
    output = tmp_path / "render-1.mp4"
    output.write_bytes(b"video")
    tracker.register(output, ArtifactKind.RENDERED_OUTPUT)
    job = RenderJob(tracker=tracker)

    _walk_to_streaming(job)
    job.close()
    job.close()

    assert job.state is JobState.CLEANED
    assert job.succeeded
    assert tracker.releases == 1
    assert not output.exists()


@pytest.mark.parametrize("steps", [0, 1, 2, 3])
def test_failure_from_any_active_state_releases_once(steps: int) -> None:
    tracker = CountingTracker()
    job = RenderJob(tracker=tracker)
    for state in (JobState.RESOLVING, JobState.BUNDLE_READY, JobState.RENDERING)[:steps]:
        job.advance(state)

    job.fail(RuntimeError("boom"))
    job.fail(RuntimeError("again"))

    assert job.state is JobState.FAILED
    assert job.failure == "boom"
    assert tracker.releases == 1


def test_close_after_failure_is_noop() -> None:
    tracker = CountingTracker()
    job = RenderJob(tracker=tracker)
    job.fail()

    job.close()

    assert job.state is JobState.FAILED
    assert tracker.releases == 1


def test_states_cannot_be_skipped() -> None:
    job = RenderJob(tracker=ArtifactTracker())

    with pytest.raises(InvalidJobTransition):
        job.advance(JobState.RENDERING)


def test_terminal_states_are_not_reachable_through_advance() -> None:
    job = RenderJob(tracker=ArtifactTracker())
    _walk_to_streaming(job)

    with pytest.raises(InvalidJobTransition):
        job.advance(JobState.CLEANED)


def test_streaming_job_cannot_fail() -> None:
    job = RenderJob(tracker=ArtifactTracker())
    _walk_to_streaming(job)

    with pytest.raises(InvalidJobTransition):
        job.fail(RuntimeError("late"))


def test_job_ids_are_unique() -> None:
    assert RenderJob(tracker=ArtifactTracker()).job_id != RenderJob(tracker=ArtifactTracker()).job_id


def test_resolved_clip_props_use_camel_case() -> None:
    clip = ResolvedClip(url="file:///tmp/a.mp4", start_time_ms=250, end_time_ms=1250)

    assert clip.duration_ms == 1000
    assert clip.to_props() == {"url": "file:///tmp/a.mp4", "startTimeMs": 250, "endTimeMs": 1250}
