"""Filesystem assertions shared by pipeline tests."""

from __future__ import annotations

import os
import time
from pathlib import Path


def scratch_files(directory: Path) -> list[Path]:
    return sorted(path for path in directory.iterdir() if path.is_file())


def age_path(path: Path, seconds: float) -> None:
    """Backdate ``path`` modification time by ``seconds``."""
    stamp = time.time() - seconds
    os.utime(path, (stamp, stamp))
