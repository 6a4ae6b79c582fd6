"""FastAPI middleware stack — request context and access log with metrics."""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable, Awaitable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from mediagate.shared.observability.metrics import HTTP_REQUEST_DURATION, HTTP_REQUESTS_TOTAL

logger = structlog.get_logger(__name__)

UNMATCHED_ENDPOINT = "<unmatched>"

_CONTEXT_KEYS = ("request_id", "http_method", "http_path")


def endpoint_label(request: Request) -> str:
    """Route template that served ``request``, e.g. ``/api/v1/video-info``.

    Only meaningful once routing has run. Unrouted requests share one label
    so arbitrary paths cannot grow the metric series.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ENDPOINT


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds request identity to structlog's context for the whole request.

    Every event logged while the request runs, including each egress attempt
    made on its behalf, carries ``request_id``, ``http_method`` and
    ``http_path``. The id is taken from ``X-Request-ID`` when the caller sends
    one and is echoed back on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            http_method=request.method,
            http_path=request.url.path,
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars(*_CONTEXT_KEYS)
        response.headers["X-Request-ID"] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One access-log line and one set of Prometheus samples per request."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration = time.monotonic() - start
        endpoint = endpoint_label(request)

        HTTP_REQUESTS_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(duration)

        logger.info(
            "http_request",
            endpoint=endpoint,
            status=response.status_code,
            duration_ms=round(duration * 1000, 2),
            client=request.client.host if request.client else "unknown",
        )
        return response
