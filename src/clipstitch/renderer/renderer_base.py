"""Abstract renderer contract: bundle, select composition, render."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

ProgressCallback = Callable[[float], None]


@dataclass(slots=True, frozen=True)
class BundleHandle:
    """Opaque reference to a compiled, servable composition bundle."""

    serve_url: str


@dataclass(slots=True, frozen=True)
class CompositionDescriptor:
    """Renderer's description of a selected composition."""

    id: str
    width: int
    height: int
    fps: int
    duration_in_frames: int


class CompositionRenderer(ABC):
    """Base interface for external renderers."""

    @abstractmethod
    async def bundle(self, entry_point: str) -> BundleHandle:
        """Build a bundle from ``entry_point``."""

    @abstractmethod
    async def select_composition(
        self,
        bundle: BundleHandle,
        composition_id: str,
        input_props: Mapping[str, Any],
    ) -> CompositionDescriptor:
        """Return the descriptor of ``composition_id`` evaluated with ``input_props``."""

    @abstractmethod
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
        """Render ``composition`` to ``output_path``; raise on any failure."""


__all__ = [
    "BundleHandle",
    "CompositionDescriptor",
    "CompositionRenderer",
    "ProgressCallback",
]
