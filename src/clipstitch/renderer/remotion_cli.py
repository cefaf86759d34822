"""Renderer backed by the Remotion command line interface."""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .composition import clips_from_props, duration_in_frames
from .renderer_base import BundleHandle, CompositionDescriptor, CompositionRenderer, ProgressCallback

logger = logging.getLogger(__name__)

_FRAMES_RE = re.compile(r"(\d+)\s*/\s*(\d+)")
_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_LOG_TAIL = 40


class RemotionCliError(RuntimeError):
    """Raised when a Remotion CLI invocation fails."""


def parse_progress(line: str) -> float | None:
    """Extract a 0-100 progress value from a CLI output line."""
    lowered = line.lower()
    if "render" not in lowered and "encod" not in lowered and "%" not in line:
        return None
    match = _FRAMES_RE.search(line)
    if match:
        done, total = int(match.group(1)), int(match.group(2))
        if total > 0:
            return min(100.0, done * 100.0 / total)
    match = _PERCENT_RE.search(line)
    if match:
        return min(100.0, float(match.group(1)))
    return None


@dataclass(slots=True)
class RemotionCliRenderer(CompositionRenderer):
    """Drive ``remotion bundle|compositions|render`` as async subprocesses."""

    command: Sequence[str] = ("npx", "remotion")
    project_dir: Path = Path(".")
    bundle_dir: Path = Path("build")
    default_width: int = 1920
    default_height: int = 1080
    log: logging.Logger = field(default_factory=lambda: logger)

    async def bundle(self, entry_point: str) -> BundleHandle:
        out_dir = self.bundle_dir / f"clipstitch-bundle-{time.time_ns()}"
        await self._run(
            [*self.command, "bundle", entry_point, f"--out-dir={out_dir}"],
            action="bundle",
        )
        self.log.info("renderer.bundle.built", extra={"serve_url": str(out_dir)})
        return BundleHandle(serve_url=str(out_dir))

    async def select_composition(
        self,
        bundle: BundleHandle,
        composition_id: str,
        input_props: Mapping[str, Any],
    ) -> CompositionDescriptor:
        lines = await self._run(
            [
                *self.command,
                "compositions",
                bundle.serve_url,
                f"--props={json.dumps(dict(input_props))}",
                "--quiet",
            ],
            action="compositions",
        )
        available = {token for line in lines for token in line.split()}
        if composition_id not in available:
            raise RemotionCliError(
                f"composition '{composition_id}' not found in bundle {bundle.serve_url}"
            )
        fps = int(input_props.get("fps", 30))
        return CompositionDescriptor(
            id=composition_id,
            width=self.default_width,
            height=self.default_height,
            fps=fps,
            duration_in_frames=duration_in_frames(clips_from_props(dict(input_props)), fps),
        )

    async def render_media(
        self,
        *,
        composition: CompositionDescriptor,
        bundle: BundleHandle,
        codec: str,
        output_path: Path,
        input_props: Mapping[str, Any],
        on_progress: ProgressCallback,
    ) -> None:
        await self._run(
            [
                *self.command,
                "render",
                bundle.serve_url,
                composition.id,
                str(output_path),
                f"--codec={codec}",
                f"--props={json.dumps(dict(input_props))}",
                f"--width={composition.width}",
                f"--height={composition.height}",
            ],
            action="render",
            on_progress=on_progress,
        )

    async def _run(
        self,
        argv: list[str],
        *,
        action: str,
        on_progress: ProgressCallback | None = None,
    ) -> list[str]:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(self.project_dir),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            raise RemotionCliError(f"remotion {action}: cannot start {argv[0]}: {exc}") from exc

        assert process.stdout is not None
        lines: list[str] = []
        buffer = ""
        try:
            while True:
                chunk = await process.stdout.read(4096)
                if not chunk:
                    break
                buffer += chunk.decode(errors="ignore")
                # progress bars redraw with carriage returns
                *complete, buffer = re.split(r"[\r\n]", buffer)
                for line in complete:
                    self._consume_line(line, lines, on_progress)
            if buffer:
                self._consume_line(buffer, lines, on_progress)
            return_code = await process.wait()
        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        if return_code != 0:
            tail = "\n".join(lines[-20:])
            raise RemotionCliError(f"remotion {action} failed (exit={return_code}): {tail}")
        return lines

    def _consume_line(
        self,
        raw: str,
        lines: list[str],
        on_progress: ProgressCallback | None,
    ) -> None:
        line = raw.strip()
        if not line:
            return
        if on_progress is not None:
            value = parse_progress(line)
            if value is not None:
                on_progress(value)
                return
        lines.append(line)
        if len(lines) > _LOG_TAIL:
            del lines[0]
        self.log.debug("renderer.output", extra={"line": line})


__all__ = ["RemotionCliError", "RemotionCliRenderer", "parse_progress"]
