"""Structural validation of render payloads.

Validation is a pure function of the payload and never touches the network or
the filesystem.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from .render_errors import FieldIssue, InvalidRequestError
from .render_schemas import RenderRequest

logger = logging.getLogger(__name__)

ROOT_PATH = "body"


def _format_loc(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return ROOT_PATH
    return ".".join(str(part) for part in loc)


def validate_render_request(payload: Any) -> RenderRequest:
    """Return a :class:`RenderRequest` or raise listing every violated field."""
    try:
        return RenderRequest.model_validate(payload)
    except ValidationError as exc:
        issues = [
            FieldIssue(path=_format_loc(error["loc"]), message=error["msg"])
            for error in exc.errors(include_url=False)
        ]
        logger.info(
            "render.request.invalid",
            extra={"issues": [issue.path for issue in issues]},
        )
        raise InvalidRequestError(issues) from exc


__all__ = ["validate_render_request"]
