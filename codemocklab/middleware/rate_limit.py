from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import time

from ..core.logger import get_logger

logger = get_logger(__name__)

WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per client on the expensive endpoints."""

    def __init__(self, app, requests_per_minute=60, protected_endpoints=None):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.protected_endpoints = tuple(protected_endpoints or ())
        self.requests = {}

    def _is_protected(self, path: str) -> bool:
        return any(path.startswith(endpoint) for endpoint in self.protected_endpoints)

    def _recent(self, key, now: float) -> list:
        """Timestamps of the key still inside the window; idle keys are dropped."""
        recent = [
            req_time
            for req_time in self.requests.get(key, ())
            if req_time > now - WINDOW_SECONDS
        ]
        if recent:
            self.requests[key] = recent
        else:
            self.requests.pop(key, None)
        return recent

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method == "OPTIONS" or not self._is_protected(path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key = (client_ip, path)
        now = time.time()

        recent = self._recent(key, now)
        if len(recent) >= self.requests_per_minute:
            logger.warning(f"Rate limit exceeded for {client_ip} on {path}")
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": "请求过于频繁，请稍后再试",
                    "code": "RATE_LIMITED",
                    "type": "RateLimitError",
                },
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )

        self.requests[key] = recent + [now]
        return await call_next(request)
