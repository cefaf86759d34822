"""Fetch source clips into the scratch directory."""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from ..render.render_errors import DownloadError
from ..render.render_models import ArtifactKind
from .artifact_tracker import ArtifactTracker

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB


def fresh_scratch_path(directory: Path, prefix: str, suffix: str = ".mp4") -> Path:
    """Return a collision-free path under ``directory``."""
    return directory / f"{prefix}-{time.time_ns()}-{secrets.token_hex(4)}{suffix}"


@dataclass(slots=True)
class ClipDownloader:
    """Streams remote clips to local files tracked by the job."""

    scratch_dir: Path
    timeout_seconds: float = 180.0
    chunk_size: int = CHUNK_SIZE
    transport: httpx.AsyncBaseTransport | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    async def download(self, url: str, tracker: ArtifactTracker) -> Path:
        """Download ``url`` and return the local path.

        The destination is registered before the first byte is written so a
        partial file is still removed when the transfer fails.
        """
        dest = fresh_scratch_path(self.scratch_dir, "input")
        tracker.register(dest, ArtifactKind.DOWNLOADED_CLIP)
        self.log.info("media.download.start", extra={"url": url, "path": str(dest)})

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    if response.status_code >= 400:
                        raise DownloadError(
                            url,
                            response.status_code,
                            f"HTTP {response.status_code} {response.reason_phrase}".strip(),
                        )
                    size = 0
                    with dest.open("wb") as sink:
                        async for chunk in response.aiter_bytes(self.chunk_size):
                            sink.write(chunk)
                            size += len(chunk)
        except httpx.HTTPError as exc:
            raise DownloadError(url, None, str(exc) or type(exc).__name__) from exc

        if size == 0:
            raise DownloadError(url, response.status_code, "empty response body")

        self.log.info(
            "media.download.done",
            extra={"url": url, "path": str(dest), "size_bytes": size},
        )
        return dest


__all__ = ["ClipDownloader", "fresh_scratch_path"]
