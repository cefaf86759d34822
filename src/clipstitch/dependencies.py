"""Dependency wiring helpers."""

from __future__ import annotations

from datetime import timedelta

import httpx
from fastapi import FastAPI

from .api.errors import ApiError, api_error_handler
from .config import AppConfig
from .media.downloads import ClipDownloader
from .media.stale_assets import StaleAssetSweeper
from .probes.duration_probe import DurationProbe, build_probe
from .probes.metadata_resolver import MetadataResolver
from .render.render_api import router as render_router
from .render.render_service import RenderService
from .renderer.bundle_cache import BundleCache
from .renderer.remotion_cli import RemotionCliRenderer
from .renderer.render_executor import RenderExecutor
from .renderer.renderer_base import CompositionRenderer


def build_render_service(
    config: AppConfig,
    *,
    renderer: CompositionRenderer | None = None,
    probe: DurationProbe | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RenderService:
    """Assemble the render pipeline from configuration.

    ``renderer``, ``probe`` and ``transport`` replace the external
    collaborators, which is how tests run the pipeline without Node or ffprobe.
    """
    active_renderer = renderer or RemotionCliRenderer(
        command=config.renderer_argv(),
        project_dir=config.renderer_project_dir,
    )
    active_probe = probe or build_probe(
        config.probe_argv(),
        config.probe_fallback_argv(),
        timeout_seconds=config.probe_timeout_seconds,
    )
    return RenderService(
        downloader=ClipDownloader(
            scratch_dir=config.scratch_dir,
            timeout_seconds=config.download_timeout_seconds,
            chunk_size=config.download_chunk_size_bytes,
            transport=transport,
        ),
        resolver=MetadataResolver(probe=active_probe),
        bundles=BundleCache(renderer=active_renderer, entry_point=config.composition_entry_point),
        executor=RenderExecutor(
            renderer=active_renderer,
            scratch_dir=config.scratch_dir,
            composition_id=config.composition_id,
            codec=config.render_codec,
            timeout_seconds=config.render_timeout_seconds,
        ),
        sweeper=StaleAssetSweeper(
            scratch_dir=config.scratch_dir,
            patterns=config.stale_asset_patterns,
            max_age=timedelta(seconds=config.stale_asset_max_age_seconds),
        ),
        max_concurrent_jobs=config.max_concurrent_jobs,
    )


def include_routers(app: FastAPI, config: AppConfig, render_service: RenderService) -> None:
    """Mount routers and attach services."""
    app.state.config = config
    app.state.render_service = render_service
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.include_router(render_router)
