"""Application configuration.

Values come from the environment (or a ``.env`` file). The defaults keep the
service runnable on a developer machine that has Node.js and the Remotion CLI
installed next to the composition sources.
"""

from __future__ import annotations

import shlex
import tempfile
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _default_scratch_dir() -> Path:
    return Path(tempfile.gettempdir())


class AppConfig(BaseSettings):
    """Settings container shared by the HTTP layer and the render pipeline."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    api_bearer_token: str | None = Field(
        default=None,
        description="Static bearer token required by POST /render.",
    )
    host: str = Field(default="0.0.0.0", description="Bind address for clipstitch-serve.")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port for clipstitch-serve.")
    scratch_dir: Path = Field(
        default_factory=_default_scratch_dir,
        description="Directory for downloaded clips, rendered output and renderer assets.",
    )
    composition_entry_point: str = Field(
        default="remotion/index.tsx",
        description="Entry point handed to the bundle builder.",
    )
    composition_id: str = Field(default="VideoComposition", min_length=1)
    render_codec: str = Field(default="h264", min_length=1)
    renderer_project_dir: Path = Field(
        default=Path("."),
        description="Working directory of the renderer CLI (holds package.json).",
    )
    renderer_command: str = Field(
        default="npx remotion",
        description="Command prefix used to reach the renderer CLI.",
    )
    probe_command: str = Field(
        default="npx remotion ffprobe",
        description="Primary duration probe invocation.",
    )
    probe_fallback_command: str = Field(
        default="ffprobe",
        description="Fallback probe binary resolved on PATH.",
    )
    stale_asset_patterns: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("remotion-*", "react-motion-render*"),
        description="Glob patterns of renderer asset directories eligible for sweeping.",
    )
    stale_asset_max_age_seconds: float = Field(default=600.0, gt=0)
    download_timeout_seconds: float = Field(default=180.0, gt=0)
    download_chunk_size_bytes: int = Field(default=1024 * 1024, ge=1024)
    probe_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional probe deadline; unset means wait indefinitely.",
    )
    render_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional render deadline; unset means wait indefinitely.",
    )
    max_concurrent_jobs: int = Field(
        default=0,
        ge=0,
        description="Upper bound on concurrently running jobs; 0 disables the limit.",
    )

    @field_validator("stale_asset_patterns", mode="before")
    @classmethod
    def _split_patterns(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    def renderer_argv(self) -> list[str]:
        return shlex.split(self.renderer_command)

    def probe_argv(self) -> list[str]:
        return shlex.split(self.probe_command)

    def probe_fallback_argv(self) -> list[str]:
        return shlex.split(self.probe_fallback_command)


def load_config() -> AppConfig:
    """Load configuration from the environment and prepare the scratch dir."""
    config = AppConfig()
    config.scratch_dir.mkdir(parents=True, exist_ok=True)
    return config


__all__ = ["AppConfig", "load_config"]
