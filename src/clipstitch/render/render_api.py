"""HTTP routes for render operations."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.background import BackgroundTask

from ..api.auth import require_bearer_token
from ..api.errors import ApiError, invalid_json_error, render_failed_error, validation_error
from .render_errors import InvalidRequestError, RenderServiceError
from .render_models import RenderJob
from .render_service import RenderService
from .responses import TrackedFileResponse

router = APIRouter(tags=["render"])
logger = logging.getLogger(__name__)


def get_render_service(request: Request) -> RenderService:
    """Fetch render service from application state."""
    try:
        return request.app.state.render_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("RenderService is not configured") from exc


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


def job_file_response(service: RenderService, job: RenderJob, output_path: Path) -> TrackedFileResponse:
    """Stream ``output_path``; the job is closed once the stream ends."""
    try:
        return TrackedFileResponse(
            output_path,
            on_close=lambda: service.finish(job),
            headers={"X-Job-Id": job.job_id},
            background=BackgroundTask(service.sweeper.sweep_quietly),
        )
    except Exception:
        service.finish(job)
        raise


def _failure_response(error: ApiError, service: RenderService) -> JSONResponse:
    response = error.to_response()
    response.background = BackgroundTask(service.sweeper.sweep_quietly)
    return response


@router.post("/render", dependencies=[Depends(require_bearer_token)])
async def render_video(
    request: Request,
    service: RenderService = Depends(get_render_service),
) -> Response:
    """Validate the request, render it and stream the MP4 back."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("render.request.invalid_json")
        raise invalid_json_error() from None

    job: RenderJob = service.open_job()
    try:
        service.validate(job, payload)
    except InvalidRequestError as exc:
        raise validation_error(
            [{"path": issue.path, "message": issue.message} for issue in exc.issues]
        ) from exc

    try:
        output_path = await service.execute(job)
    except RenderServiceError as exc:
        logger.error(
            "render.request.failed",
            extra={"job_id": job.job_id, "error": str(exc), "error_type": type(exc).__name__},
        )
        return _failure_response(render_failed_error(str(exc) or None, job_id=job.job_id), service)
    except Exception as exc:
        logger.exception("render.request.unexpected_error", extra={"job_id": job.job_id})
        return _failure_response(render_failed_error(str(exc) or None, job_id=job.job_id), service)

    return job_file_response(service, job, output_path)


__all__ = ["get_render_service", "job_file_response", "router"]
