"""
Request middleware: correlation IDs, access logging and HTTP timing.

HTTP metrics are keyed by report family (`http.report.sales`,
`http.report.compare`) so they line up with the engine's own
`report.<family>` timings; the gap between the two is routing and
serialization overhead.
"""
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from reporting.config import REPORT_FAMILIES
from reporting.observability import (
    get_logger,
    generate_correlation_id,
    set_correlation_id,
    metrics,
)

logger = get_logger(__name__)

HEALTH_PATH = "/api/health"
REPORTS_PATH = "/api/reports"


def report_family(request: Request) -> Optional[str]:
    """Family a reports request asks for, or None for other routes."""
    path = request.url.path.rstrip("/")
    if path == REPORTS_PATH:
        family = request.query_params.get("type", "").lower()
        return family if family in REPORT_FAMILIES else "invalid"
    if path.startswith(REPORTS_PATH + "/"):
        return path[len(REPORTS_PATH) + 1:]
    return None


def metric_name(request: Request) -> str:
    family = report_family(request)
    if family is not None:
        return f"http.report.{family}"
    return f"http.{request.method} {request.url.path}"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation ID, logs it and records its timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Request-ID") or generate_correlation_id()
        set_correlation_id(correlation_id)

        start_time = time.perf_counter()
        path = request.url.path
        quiet = path == HEALTH_PATH
        name = metric_name(request)
        context = {
            "method": request.method,
            "path": path,
            "family": report_family(request),
        }

        if not quiet:
            logger.info(
                f"Report request: {request.method} {path}",
                extra={
                    **context,
                    "query": str(request.url.query),
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Report request failed: {request.method} {path}",
                extra={**context, "duration_ms": round(duration_ms, 2), "error": str(e)},
            )
            metrics.record_error(type(e).__name__)
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if not quiet:
            log = logger.info if response.status_code < 400 else logger.warning
            log(
                f"Report response: {response.status_code} {path}",
                extra={
                    **context,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )

        metrics.record_request(name)
        metrics.record_timing(name, duration_ms)
        if response.status_code >= 400:
            metrics.record_error(f"HTTP_{response.status_code}")

        return response
