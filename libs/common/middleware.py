"""Request logging for the portal.

Every request gets a request id (taken from ``X-Request-ID`` when the
caller sends one) that is bound to all log lines written while it runs and
echoed back in the response headers together with the handling time.
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

# health checks and static assets are not worth a log line each
QUIET_PATHS = {"/health", "/favicon.ico"}
QUIET_PREFIXES = ("/_next", "/images", "/public")


def is_quiet(path: str) -> bool:
    return path in QUIET_PATHS or path.startswith(QUIET_PREFIXES)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=path,
            method=request.method,
        )
        quiet = is_quiet(path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "Unhandled error",
                extra={
                    "extra_fields": {
                        "error": str(exc),
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    }
                },
            )
            clear_request_context()
            raise

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        if not quiet:
            fields = {"status_code": response.status_code, "duration_ms": duration_ms}
            if response.status_code in (302, 303, 307):
                fields["location"] = response.headers.get("location")
            if request.url.query:
                fields["query"] = str(request.url.query)
            level = "warning" if response.status_code >= 400 else "info"
            getattr(logger, level)(f"{request.method} {path}", extra={"extra_fields": fields})

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = str(duration_ms)
        clear_request_context()
        return response


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and wrap ``app`` in the request logging middleware."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
