"""Request logging middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status, duration and request ID for every request.

    Client errors are logged at warning level so denied and conflicting team
    operations stand out from normal traffic.
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = getattr(request.state, "request_id", None)
        start_time = time.perf_counter()

        response: Response = await call_next(request)

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"http_request: method={request.method} path={request.url.path} "
            f"status={response.status_code} duration_ms={duration_ms} request_id={request_id}",
        )
        return response
