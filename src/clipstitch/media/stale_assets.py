"""Sweeper for renderer asset directories abandoned by earlier runs."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS: tuple[str, ...] = ("remotion-*", "react-motion-render*")
DEFAULT_MAX_AGE = timedelta(minutes=10)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class StaleAssetSweeper:
    """Remove renderer asset directories older than ``max_age``.

    Directories younger than ``max_age`` may belong to jobs still rendering
    in this or another process and are left alone.
    """

    scratch_dir: Path
    patterns: Sequence[str] = DEFAULT_PATTERNS
    max_age: timedelta = DEFAULT_MAX_AGE
    clock: Callable[[], datetime] = _default_clock
    log: logging.Logger = field(default_factory=lambda: logger)

    def find_stale(self, now: datetime | None = None) -> list[Path]:
        current = now or self.clock()
        cutoff = current - self.max_age
        stale: list[Path] = []
        seen: set[Path] = set()
        if not self.scratch_dir.is_dir():
            return stale
        for pattern in self.patterns:
            for candidate in sorted(self.scratch_dir.glob(pattern)):
                if candidate in seen or not candidate.is_dir() or candidate.is_symlink():
                    continue
                seen.add(candidate)
                try:
                    mtime = datetime.fromtimestamp(candidate.stat().st_mtime, tz=timezone.utc)
                except FileNotFoundError:
                    continue
                if mtime < cutoff:
                    stale.append(candidate)
        return stale

    def sweep(self, now: datetime | None = None) -> list[Path]:
        """Delete stale directories and return the ones removed."""
        removed: list[Path] = []
        for directory in self.find_stale(now):
            try:
                shutil.rmtree(directory)
            except FileNotFoundError:
                continue
            except OSError as exc:
                self.log.warning(
                    "media.stale.remove_failed",
                    extra={"path": str(directory), "error": str(exc)},
                )
                continue
            removed.append(directory)
            self.log.info("media.stale.removed", extra={"path": str(directory)})
        return removed

    def sweep_quietly(self) -> None:
        """Background-task entry point; a failed sweep is only logged."""
        try:
            removed = self.sweep()
        except Exception:
            self.log.exception("media.stale.sweep_failed", extra={"scratch_dir": str(self.scratch_dir)})
            return
        if removed:
            self.log.info("media.stale.swept", extra={"removed": len(removed)})


__all__ = ["DEFAULT_MAX_AGE", "DEFAULT_PATTERNS", "StaleAssetSweeper"]
