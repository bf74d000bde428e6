"""API middleware for request/response processing."""

from src.api.middleware.cors import configure_cors
from src.api.middleware.error_handler import (
    error_handling_middleware,
    register_exception_handlers,
    team_error_handler,
)
from src.api.middleware.observability import RequestLoggingMiddleware
from src.api.middleware.request_id import RequestIdMiddleware

__all__ = [
    "configure_cors",
    "error_handling_middleware",
    "register_exception_handlers",
    "team_error_handler",
    "RequestIdMiddleware",
    "RequestLoggingMiddleware",
]
