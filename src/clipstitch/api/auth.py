"""Bearer token guard for the render endpoint."""

from __future__ import annotations

import hmac

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import AppConfig
from .errors import unauthorized_error

security = HTTPBearer(auto_error=False)


def get_config(request: Request) -> AppConfig:
    try:
        return request.app.state.config  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("AppConfig is not configured") from exc


def require_bearer_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    config: AppConfig = Depends(get_config),
) -> None:
    expected = config.api_bearer_token
    if not expected:
        raise unauthorized_error("API bearer token is not configured")

    if credentials is None:
        if request.headers.get("Authorization"):
            raise unauthorized_error("Authorization header must use Bearer scheme")
        raise unauthorized_error("Bearer token is missing")

    if not hmac.compare_digest(credentials.credentials.encode(), expected.encode()):
        raise unauthorized_error("Bearer token is invalid")


__all__ = ["get_config", "require_bearer_token"]
