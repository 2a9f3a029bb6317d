"""Request context middleware for Stockroom API.

Every request gets a correlation ID that is bound into the structlog
context together with the method and path, echoed back in the
``X-Request-ID`` header, and logged once with its status and duration.
Authentication lives in ``app.api.auth``; unhandled errors are rendered
by the exception handlers in ``app.main``.
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Logged only when they fail
QUIET_PATHS = frozenset({"/health", "/ready"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request ID and request metadata to the log context."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            if request.url.path not in QUIET_PATHS or status_code >= 400:
                route = request.scope.get("route")
                logger.info(
                    "Request completed",
                    route=getattr(route, "path", None),
                    status_code=status_code,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install the request context middleware on the application."""
    app.add_middleware(RequestContextMiddleware)
