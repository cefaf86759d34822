"""Pydantic schemas for inbound render requests."""

from __future__ import annotations

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    StrictInt,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic_core import PydanticCustomError

DEFAULT_FPS = 30
DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080

_HTTP_URL = TypeAdapter(HttpUrl)


class ClipSpec(BaseModel):
    """One source clip as submitted by the caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    start_time_ms: StrictInt | None = Field(default=None, ge=0, alias="startTimeMs")
    end_time_ms: StrictInt | None = Field(default=None, ge=0, alias="endTimeMs")

    @field_validator("url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        # the submitted string is kept verbatim; only its shape is checked
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as exc:
            raise PydanticCustomError(
                "url_parsing",
                "{reason}",
                {"reason": exc.errors(include_url=False)[0]["msg"]},
            ) from None
        return value

    @field_validator("end_time_ms")
    @classmethod
    def _end_after_start(cls, value: int | None, info: ValidationInfo) -> int | None:
        start = info.data.get("start_time_ms")
        if value is not None and start is not None and value <= start:
            raise PydanticCustomError(
                "time_window",
                "endTimeMs must be greater than startTimeMs",
            )
        return value


class RenderRequest(BaseModel):
    """Validated render request with defaults applied."""

    model_config = ConfigDict(frozen=True)

    clips: list[ClipSpec] = Field(min_length=1)
    fps: StrictInt = Field(default=DEFAULT_FPS, ge=1, le=120)
    width: StrictInt = Field(default=DEFAULT_WIDTH, ge=1, le=3840)
    height: StrictInt = Field(default=DEFAULT_HEIGHT, ge=1, le=2160)


__all__ = ["ClipSpec", "RenderRequest", "DEFAULT_FPS", "DEFAULT_WIDTH", "DEFAULT_HEIGHT"]
