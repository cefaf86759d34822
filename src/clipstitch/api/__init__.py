"""HTTP plumbing shared by the routers."""

from .errors import ApiError, api_error_handler

__all__ = ["ApiError", "api_error_handler"]
