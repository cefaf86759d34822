"""Domain service coordinating one render job end to end."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from ..media.artifact_tracker import ArtifactTracker
from ..media.downloads import ClipDownloader
from ..media.stale_assets import StaleAssetSweeper
from ..probes.metadata_resolver import MetadataResolver
from ..renderer.bundle_cache import BundleCache
from ..renderer.render_executor import RenderExecutor
from .render_errors import InvalidRequestError
from .render_models import ArtifactKind, JobState, RenderJob, ResolvedClip
from .render_schemas import ClipSpec, RenderRequest
from .validation import validate_render_request

logger = structlog.get_logger(__name__)

PROGRESS_LOG_STEP = 10.0


@dataclass(slots=True)
class RenderService:
    """Coordinates validation, clip acquisition, bundling and rendering.

    A job leaves :meth:`execute` either in ``STREAMING`` with its output
    tracked, or in ``FAILED`` with every artifact already released. The caller
    owns the streaming phase and must call :meth:`RenderJob.close` once the
    response is finished or aborted.
    """

    downloader: ClipDownloader
    resolver: MetadataResolver
    bundles: BundleCache
    executor: RenderExecutor
    sweeper: StaleAssetSweeper
    max_concurrent_jobs: int = 0
    log: Any = field(default_factory=lambda: logger)
    _admission: asyncio.Semaphore | None = None

    def __post_init__(self) -> None:
        if self.max_concurrent_jobs > 0 and self._admission is None:
            self._admission = asyncio.Semaphore(self.max_concurrent_jobs)

    def open_job(self) -> RenderJob:
        job = RenderJob(tracker=ArtifactTracker())
        job.tracker.job_id = job.job_id
        return job

    def validate(self, job: RenderJob, payload: Any) -> RenderRequest:
        """Validate ``payload`` for ``job``; a failure terminates the job."""
        try:
            request = validate_render_request(payload)
        except InvalidRequestError as exc:
            job.fail(exc)
            self.log.info("render.job.rejected", job_id=job.job_id, issues=len(exc.issues))
            raise
        job.request = request
        job.advance(JobState.RESOLVING)
        return request

    async def execute(self, job: RenderJob) -> Path:
        """Resolve clips, fetch the bundle and render; return the output path."""
        request = job.request
        if request is None or job.state is not JobState.RESOLVING:
            raise RuntimeError(f"job {job.job_id} is not ready to execute (state={job.state})")

        self.log.info(
            "render.job.started",
            job_id=job.job_id,
            clips=len(request.clips),
            fps=request.fps,
            width=request.width,
            height=request.height,
        )
        try:
            async with self._admitted():
                job.clips = await self._resolve_clips(job, request.clips)
                bundle = await self.bundles.get_bundle()
                job.advance(JobState.BUNDLE_READY)

                job.advance(JobState.RENDERING)
                output_path = self.executor.allocate_output_path()
                job.tracker.register(output_path, ArtifactKind.RENDERED_OUTPUT)
                job.output_path = await self.executor.render(
                    bundle,
                    job.clips,
                    fps=request.fps,
                    width=request.width,
                    height=request.height,
                    output_path=output_path,
                    on_progress=self._progress_observer(job),
                )
        except BaseException as exc:
            # cancellation included: artifacts must not outlive the job
            job.fail(exc)
            self.log.warning(
                "render.job.failed",
                job_id=job.job_id,
                error=job.failure,
                error_type=type(exc).__name__,
            )
            raise

        job.advance(JobState.STREAMING)
        self.log.info("render.job.rendered", job_id=job.job_id, output=str(job.output_path))
        return job.output_path

    async def run(self, payload: Any) -> RenderJob:
        """Validate and execute ``payload``; the returned job is streaming."""
        job = self.open_job()
        self.validate(job, payload)
        await self.execute(job)
        return job

    def finish(self, job: RenderJob) -> None:
        """Close a streaming job; safe to call from any exit path."""
        job.close()
        self.log.info("render.job.cleaned", job_id=job.job_id, state=job.state.value)

    async def _resolve_clips(self, job: RenderJob, clips: list[ClipSpec]) -> list[ResolvedClip]:
        failures: list[BaseException] = []

        async def acquire(clip: ClipSpec) -> ResolvedClip:
            try:
                local_path = await self.downloader.download(clip.url, job.tracker)
                return await self.resolver.resolve(
                    clip,
                    probe_target=str(local_path),
                    render_url=local_path.as_uri(),
                )
            except Exception as exc:
                failures.append(exc)
                raise

        # every sibling settles before the first failure is raised, so nothing
        # registers an artifact after the job has been cleaned up
        results = await asyncio.gather(*(acquire(clip) for clip in clips), return_exceptions=True)
        if failures:
            raise failures[0]
        for result in results:
            if isinstance(result, BaseException):
                raise result
        resolved = [result for result in results if isinstance(result, ResolvedClip)]
        self.log.info(
            "render.clips.resolved",
            job_id=job.job_id,
            total_ms=sum(clip.duration_ms for clip in resolved),
        )
        return resolved

    @contextlib.asynccontextmanager
    async def _admitted(self) -> AsyncIterator[None]:
        if self._admission is None:
            yield
            return
        async with self._admission:
            yield

    def _progress_observer(self, job: RenderJob):
        next_step = PROGRESS_LOG_STEP

        def observe(percent: float) -> None:
            nonlocal next_step
            job.progress_percent = percent
            if percent >= next_step:
                self.log.info("render.job.progress", job_id=job.job_id, percent=round(percent, 1))
                while next_step <= percent:
                    next_step += PROGRESS_LOG_STEP

        return observe


__all__ = ["RenderService"]
