"""Per-job registry of temporary files."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from ..render.render_errors import CleanupWarning
from ..render.render_models import ArtifactKind, TempArtifact

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ArtifactTracker:
    """Records every temp file a job creates and deletes them on release.

    ``release_all`` never raises: individual deletion failures are demoted to
    :class:`CleanupWarning` entries that are logged and kept in ``warnings``.
    Calling it again only revisits paths that could not be removed earlier.
    """

    job_id: str = ""
    log: logging.Logger = field(default_factory=lambda: logger)
    _artifacts: list[TempArtifact] = field(default_factory=list)
    _released: set[Path] = field(default_factory=set)
    warnings: list[CleanupWarning] = field(default_factory=list)

    def register(self, path: Path, kind: ArtifactKind) -> TempArtifact:
        artifact = TempArtifact(path=Path(path), kind=ArtifactKind(kind))
        if artifact in self._artifacts:
            return artifact
        self._artifacts.append(artifact)
        self._released.discard(artifact.path)
        self.log.debug(
            "media.artifact.registered",
            extra={"job_id": self.job_id, "path": str(artifact.path), "kind": artifact.kind.value},
        )
        return artifact

    @property
    def artifacts(self) -> tuple[TempArtifact, ...]:
        return tuple(self._artifacts)

    def pending(self) -> list[TempArtifact]:
        return [artifact for artifact in self._artifacts if artifact.path not in self._released]

    def release_all(self) -> int:
        """Delete every registered path that is still pending; return how many."""
        removed = 0
        for artifact in self.pending():
            try:
                existed = self._remove_path(artifact.path)
            except Exception as exc:
                warning = CleanupWarning(artifact.path, str(exc))
                self.warnings.append(warning)
                self.log.warning(
                    "media.artifact.cleanup_failed",
                    extra={
                        "job_id": self.job_id,
                        "path": str(artifact.path),
                        "kind": artifact.kind.value,
                        "error": warning.reason,
                    },
                )
                continue
            self._released.add(artifact.path)
            if existed:
                removed += 1
                self.log.info(
                    "media.artifact.released",
                    extra={"job_id": self.job_id, "path": str(artifact.path), "kind": artifact.kind.value},
                )
        return removed

    @staticmethod
    def _remove_path(path: Path) -> bool:
        if path.is_symlink() or path.is_file():
            path.unlink(missing_ok=True)
            return True
        if path.is_dir():
            shutil.rmtree(path)
            return True
        return False


__all__ = ["ArtifactTracker"]
