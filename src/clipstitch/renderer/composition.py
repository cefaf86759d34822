"""Input properties and frame arithmetic for the clip-sequence composition."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from ..render.render_models import ResolvedClip


def _ms_to_frames(ms: int, fps: int) -> int:
    # half-up rounding, matching the composition runtime
    return math.floor(ms / 1000 * fps + 0.5)


def clip_frame_window(clip: ResolvedClip, fps: int) -> tuple[int, int]:
    """Return the (trim_before, trim_after) frame numbers of ``clip``."""
    return _ms_to_frames(clip.start_time_ms, fps), _ms_to_frames(clip.end_time_ms, fps)


def duration_in_frames(clips: Sequence[ResolvedClip], fps: int) -> int:
    """Length of the sequenced composition; never shorter than one frame."""
    total = sum(_ms_to_frames(clip.end_time_ms - clip.start_time_ms, fps) for clip in clips)
    return max(1, total)


def build_input_props(clips: Sequence[ResolvedClip], fps: int) -> dict[str, Any]:
    return {"clips": [clip.to_props() for clip in clips], "fps": fps}


def clips_from_props(props: dict[str, Any]) -> list[ResolvedClip]:
    return [
        ResolvedClip(
            url=item["url"],
            start_time_ms=int(item["startTimeMs"]),
            end_time_ms=int(item["endTimeMs"]),
        )
        for item in props.get("clips", [])
    ]


__all__ = [
    "build_input_props",
    "clip_frame_window",
    "clips_from_props",
    "duration_in_frames",
]
