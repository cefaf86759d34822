"""Resolve clip trim windows, probing the source when the end is omitted."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from ..render.render_errors import MetadataResolutionError, ProbeLaunchError
from ..render.render_models import ResolvedClip
from ..render.render_schemas import ClipSpec
from .duration_probe import DurationProbe

logger = logging.getLogger(__name__)


def parse_duration_seconds(raw: str | None) -> float:
    """Parse probe output into a positive, finite number of seconds."""
    text = (raw or "").strip()
    if not text or text.upper() == "N/A":
        raise ValueError("duration unavailable")
    # ffprobe may print one value per line; the first line is the format duration.
    first = text.splitlines()[0].strip()
    try:
        seconds = float(first)
    except ValueError as exc:
        raise ValueError(f"non-numeric duration {first!r}") from exc
    if not math.isfinite(seconds):
        raise ValueError(f"non-numeric duration {first!r}")
    if seconds <= 0:
        raise ValueError(f"non-positive duration {first!r}")
    return seconds


@dataclass(slots=True)
class MetadataResolver:
    """Turns :class:`ClipSpec` entries into :class:`ResolvedClip` values."""

    probe: DurationProbe
    log: logging.Logger = field(default_factory=lambda: logger)

    async def probe_duration_ms(self, target: str, *, clip_url: str) -> int:
        try:
            raw = await self.probe.probe(target)
        except ProbeLaunchError as exc:
            raise MetadataResolutionError(clip_url, f"probe failed ({exc})") from exc
        try:
            seconds = parse_duration_seconds(raw)
        except ValueError as exc:
            raise MetadataResolutionError(clip_url, str(exc)) from exc
        duration_ms = int(round(seconds * 1000))
        self.log.info(
            "probe.duration.resolved",
            extra={"url": clip_url, "duration_ms": duration_ms},
        )
        return duration_ms

    async def resolve(
        self,
        clip: ClipSpec,
        *,
        probe_target: str | None = None,
        render_url: str | None = None,
    ) -> ResolvedClip:
        """Resolve ``clip``.

        ``probe_target`` lets the caller probe a local copy instead of the
        remote URL; ``render_url`` is the location the renderer should read.
        """
        source_url = clip.url
        start = clip.start_time_ms if clip.start_time_ms is not None else 0
        end = clip.end_time_ms
        if end is None:
            end = await self.probe_duration_ms(probe_target or source_url, clip_url=source_url)

        if end <= start:
            raise MetadataResolutionError(
                source_url,
                f"endTimeMs ({end}) must be greater than startTimeMs ({start})",
            )
        return ResolvedClip(
            url=render_url or source_url,
            start_time_ms=start,
            end_time_ms=end,
            source_url=source_url,
        )


__all__ = ["MetadataResolver", "parse_duration_seconds"]
