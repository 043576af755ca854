"""
Request tracing middleware.
Propagates correlation IDs into responses and log records, and flags slow
requests in the application log.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logger import correlation_id_var, get_logger

logger = get_logger(__name__)

UNTRACKED_PREFIXES = ("/api/health", "/docs", "/openapi.json", "/favicon")


class PerformanceMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its duration and marks the slow ones.

    LLM-backed endpoints routinely take several seconds, so the threshold
    is configured by the application rather than fixed here.
    """

    def __init__(self, app, slow_request_threshold_ms: float = 2000):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(UNTRACKED_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        label = f"{request.method} {request.url.path}"
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(f"{label} raised after {elapsed_ms:.0f}ms: {str(e)}")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["x-response-time"] = str(int(elapsed_ms))

        if elapsed_ms > self.slow_request_threshold_ms:
            response.headers["x-slow-request"] = "true"
            logger.warning(
                f"Slow request {label}: {elapsed_ms:.0f}ms "
                f"(threshold {self.slow_request_threshold_ms}ms)"
            )
        elif response.status_code >= 400:
            logger.warning(f"{label} -> {response.status_code} in {elapsed_ms:.0f}ms")
        else:
            logger.info(f"{label} -> {response.status_code} in {elapsed_ms:.0f}ms")

        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Reuses the caller's correlation ID or mints one, and echoes it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = (
            request.headers.get("x-correlation-id")
            or request.headers.get("x-request-id")
            or str(uuid.uuid4())
        )
        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        response.headers["x-correlation-id"] = correlation_id
        return response


def get_correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "unknown")
