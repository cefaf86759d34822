"""Process-wide, build-once cache of the composition bundle."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from .renderer_base import BundleHandle, CompositionRenderer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BundleCache:
    """Builds the bundle on first use and serves the same handle afterwards.

    The build runs under a lock so concurrent first callers wait for a single
    build instead of racing. A failed build leaves the cache empty and the
    next caller retries.
    """

    renderer: CompositionRenderer
    entry_point: str
    log: logging.Logger = field(default_factory=lambda: logger)
    _handle: BundleHandle | None = None
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    builds: int = 0

    @property
    def handle(self) -> BundleHandle | None:
        return self._handle

    async def get_bundle(self) -> BundleHandle:
        if self._handle is not None:
            return self._handle
        async with self._lock:
            if self._handle is None:
                self.log.info("renderer.bundle.building", extra={"entry_point": self.entry_point})
                handle = await self.renderer.bundle(self.entry_point)
                self.builds += 1
                self._handle = handle
            return self._handle


__all__ = ["BundleCache"]
