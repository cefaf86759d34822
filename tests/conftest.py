from __future__ import annotations

from pathlib import Path

import pytest

from clipstitch.config import AppConfig
from clipstitch.dependencies import build_render_service
from clipstitch.render.render_service import RenderService
from tests.mocks.collaborators import ClipHost, FakeProbe, FakeRenderer

TEST_TOKEN = "test-bearer-token"


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "scratch"
    directory.mkdir()
    return directory


@pytest.fixture
def app_config(scratch_dir: Path) -> AppConfig:
    return AppConfig(
        _env_file=None,
        api_bearer_token=TEST_TOKEN,
        scratch_dir=scratch_dir,
    )


@pytest.fixture
def clip_host() -> ClipHost:
    return ClipHost()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def fake_probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def render_service(
    app_config: AppConfig,
    fake_renderer: FakeRenderer,
    fake_probe: FakeProbe,
    clip_host: ClipHost,
) -> RenderService:
    return build_render_service(
        app_config,
        renderer=fake_renderer,
        probe=fake_probe,
        transport=clip_host.transport(),
    )
