"""Streaming response bound to the job that produced the file."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path

from starlette.background import BackgroundTask
from starlette.responses import FileResponse
from starlette.types import Receive, Scope, Send

logger = logging.getLogger(__name__)

VIDEO_MEDIA_TYPE = "video/mp4"
OUTPUT_FILENAME = "output.mp4"


class TrackedFileResponse(FileResponse):
    """File response that runs ``on_close`` however the stream ends.

    ``on_close`` fires after the body has been sent, when the client
    disconnects mid-stream, and when sending fails for any other reason.
    It always runs before the background task.
    """

    def __init__(
        self,
        path: Path,
        *,
        on_close: Callable[[], None],
        headers: Mapping[str, str] | None = None,
        background: BackgroundTask | None = None,
    ) -> None:
        super().__init__(
            path,
            media_type=VIDEO_MEDIA_TYPE,
            filename=OUTPUT_FILENAME,
            headers=headers,
            background=background,
        )
        self._on_close = on_close

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        background, self.background = self.background, None
        try:
            await super().__call__(scope, receive, send)
        finally:
            self._close()
        if background is not None:
            await background()

    def _close(self) -> None:
        try:
            self._on_close()
        except Exception:
            logger.exception("render.response.close_failed", extra={"path": str(self.path)})


__all__ = ["OUTPUT_FILENAME", "TrackedFileResponse", "VIDEO_MEDIA_TYPE"]
