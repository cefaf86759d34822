"""Drive the external renderer for one resolved job."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from ..media.downloads import fresh_scratch_path
from ..render.render_errors import RenderExecutionError
from ..render.render_models import ResolvedClip
from .composition import build_input_props
from .renderer_base import BundleHandle, CompositionRenderer, ProgressCallback

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RenderExecutor:
    """Select the composition, override its size and render it to a file."""

    renderer: CompositionRenderer
    scratch_dir: Path
    composition_id: str = "VideoComposition"
    codec: str = "h264"
    timeout_seconds: float | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    def allocate_output_path(self) -> Path:
        return fresh_scratch_path(self.scratch_dir, "render")

    async def render(
        self,
        bundle: BundleHandle,
        clips: Sequence[ResolvedClip],
        *,
        fps: int,
        width: int,
        height: int,
        output_path: Path | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """Render ``clips`` and return the output path.

        Any failure, including a missing or empty output file, is raised as
        :class:`RenderExecutionError` and the partial file is removed.
        """
        target = output_path or self.allocate_output_path()
        input_props = build_input_props(clips, fps)
        observer = _AdvisoryProgress(on_progress, self.log)

        try:
            selected = await self.renderer.select_composition(bundle, self.composition_id, input_props)
            composition = dataclasses.replace(selected, width=width, height=height)
            self.log.info(
                "renderer.render.start",
                extra={
                    "composition": composition.id,
                    "width": width,
                    "height": height,
                    "fps": fps,
                    "frames": composition.duration_in_frames,
                    "output": str(target),
                },
            )
            await asyncio.wait_for(
                self.renderer.render_media(
                    composition=composition,
                    bundle=bundle,
                    codec=self.codec,
                    output_path=target,
                    input_props=input_props,
                    on_progress=observer,
                ),
                timeout=self.timeout_seconds,
            )
            if not target.is_file() or target.stat().st_size == 0:
                raise RenderExecutionError(f"renderer produced no output at {target}")
        except RenderExecutionError:
            self._discard(target)
            raise
        except asyncio.TimeoutError as exc:
            self._discard(target)
            raise RenderExecutionError(f"render timed out after {self.timeout_seconds}s") from exc
        except Exception as exc:
            self._discard(target)
            raise RenderExecutionError(str(exc) or type(exc).__name__) from exc

        observer(100.0)
        self.log.info("renderer.render.done", extra={"output": str(target)})
        return target

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            self.log.warning("renderer.output.discard_failed", extra={"path": str(path), "error": str(exc)})


class _AdvisoryProgress:
    """Forwards monotonic progress to an observer that cannot affect the render."""

    __slots__ = ("_callback", "_log", "_last")

    def __init__(self, callback: ProgressCallback | None, log: logging.Logger) -> None:
        self._callback = callback
        self._log = log
        self._last = -1.0

    def __call__(self, percent: float) -> None:
        value = max(0.0, min(100.0, float(percent)))
        if value <= self._last:
            return
        self._last = value
        if self._callback is None:
            return
        try:
            self._callback(value)
        except Exception:
            self._log.warning("renderer.progress.observer_failed", exc_info=True)


__all__ = ["RenderExecutor"]
