"""Reusable error primitives for API exception handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from fastapi import Request, status
from fastapi.responses import JSONResponse


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    code: str
    message: str
    extra: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        body: dict[str, Any] = {"code": self.code, "message": self.message}
        body.update(self.extra)
        return JSONResponse(
            status_code=self.status_code,
            content={"error": body},
            headers=dict(self.headers or {}),
        )


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


def unauthorized_error(message: str) -> ApiError:
    """Return an :class:`ApiError` representing an authentication failure."""

    return ApiError(
        status.HTTP_401_UNAUTHORIZED,
        "unauthorized",
        message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def invalid_json_error() -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, "invalid_json", "Invalid JSON body")


def validation_error(details: list[dict[str, str]]) -> ApiError:
    return ApiError(
        status.HTTP_400_BAD_REQUEST,
        "validation_failed",
        "Validation failed",
        extra={"details": details},
    )


def render_failed_error(cause: str | None, *, job_id: str | None = None) -> ApiError:
    """Return the 500 payload reported when a job fails after validation."""

    extra = {"cause": cause} if cause else {}
    headers = {"X-Job-Id": job_id} if job_id else None
    return ApiError(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "render_failed",
        "Render failed",
        extra=extra,
        headers=headers,
    )


__all__ = [
    "ApiError",
    "api_error_handler",
    "invalid_json_error",
    "render_failed_error",
    "unauthorized_error",
    "validation_error",
]
