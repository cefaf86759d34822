"""Domain-specific exceptions for the render pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class RenderServiceError(Exception):
    """Base class for render pipeline errors."""


@dataclass(slots=True, frozen=True)
class FieldIssue:
    """One violated field of an inbound request."""

    path: str
    message: str


class InvalidRequestError(RenderServiceError):
    """Raised when a render request fails structural validation."""

    def __init__(self, issues: list[FieldIssue]) -> None:
        super().__init__("; ".join(f"{issue.path}: {issue.message}" for issue in issues))
        self.issues = issues


class MetadataResolutionError(RenderServiceError):
    """Raised when a clip duration cannot be resolved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to resolve metadata for clip {url}: {reason}")
        self.url = url
        self.reason = reason


class DownloadError(RenderServiceError):
    """Raised when a source clip cannot be fetched."""

    def __init__(self, url: str, status_code: int | None, reason: str | None = None) -> None:
        detail = reason or (f"HTTP {status_code}" if status_code is not None else "unreachable")
        super().__init__(f"Failed to fetch {url}: {detail}")
        self.url = url
        self.status_code = status_code


class RenderExecutionError(RenderServiceError):
    """Raised when the external renderer fails or leaves no usable output."""


class ProbeLaunchError(RenderServiceError):
    """Raised when a probe strategy could not run at all."""


class InvalidJobTransition(RuntimeError):
    """Raised when a job is moved to a state its current state cannot reach."""


class CleanupWarning(RuntimeWarning):
    """Non-fatal failure to delete a temporary artifact."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to remove {path}: {reason}")
        self.path = path
        self.reason = reason


__all__ = [
    "CleanupWarning",
    "DownloadError",
    "FieldIssue",
    "InvalidJobTransition",
    "InvalidRequestError",
    "MetadataResolutionError",
    "ProbeLaunchError",
    "RenderExecutionError",
    "RenderServiceError",
]
