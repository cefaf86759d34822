from __future__ import annotations

import pytest

from clipstitch import main as main_module
from clipstitch.config import AppConfig


def test_serve_refuses_to_start_without_token(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    started = []
    monkeypatch.setattr(main_module, "load_config", lambda: AppConfig(_env_file=None, api_bearer_token=None, scratch_dir=tmp_path))
    monkeypatch.setattr(main_module.uvicorn, "run", lambda *args, **kwargs: started.append(kwargs))

    assert main_module.serve() == 1
    assert started == []


def test_serve_runs_uvicorn_with_configured_address(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    started = []
    config = AppConfig(_env_file=None, api_bearer_token="token", scratch_dir=tmp_path, port=4100)
    monkeypatch.setattr(main_module, "load_config", lambda: config)
    monkeypatch.setattr(main_module.uvicorn, "run", lambda app, **kwargs: started.append((app, kwargs)))

    assert main_module.serve() == 0
    app, kwargs = started[0]
    assert kwargs == {"host": "0.0.0.0", "port": 4100}
    assert app.state.config is config
