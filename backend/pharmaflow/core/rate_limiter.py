"""
Per-client request throttling for the POS API.

In-memory sliding window. Each uvicorn worker keeps its own counters.
"""
import hashlib
import time
import logging
from collections import defaultdict
from typing import Dict, List, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from pharmaflow.core.config import settings

logger = logging.getLogger(__name__)

EXEMPT_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


class RateLimiter:
    """In-memory rate limiter with sliding window."""

    def __init__(self, requests: int = 100, window: int = 60):
        """
        Args:
            requests: Maximum requests allowed per client in one window
            window: Window length in seconds
        """
        self.requests = requests
        self.window = window
        self.clients: Dict[str, List[float]] = defaultdict(list)
        self.last_cleanup = time.time()

    def is_allowed(self, client_id: str) -> Tuple[bool, int]:
        """
        Check whether a client may make another request.

        Only allowed hits are recorded.

        Returns:
            (allowed: bool, remaining: int)
        """
        now = time.time()

        # Cleanup old entries every 5 minutes
        if now - self.last_cleanup > 300:
            self._cleanup(now)
            self.last_cleanup = now

        cutoff = now - self.window
        timestamps = [ts for ts in self.clients[client_id] if ts > cutoff]
        self.clients[client_id] = timestamps

        if len(timestamps) >= self.requests:
            return False, 0
        timestamps.append(now)
        return True, self.requests - len(timestamps)

    def _cleanup(self, now: float):
        """Drop clients with no hits inside the window."""
        cutoff = now - self.window
        for client_id in list(self.clients.keys()):
            timestamps = [ts for ts in self.clients[client_id] if ts > cutoff]
            if timestamps:
                self.clients[client_id] = timestamps
            else:
                del self.clients[client_id]

        logger.info(f"Rate limiter cleanup: {len(self.clients)} active clients")


rate_limiter = RateLimiter(
    requests=settings.RATE_LIMIT_REQUESTS,
    window=settings.RATE_LIMIT_WINDOW_SECONDS
)


def client_key(request: Request) -> str:
    """Registers sharing one IP are told apart by their bearer token."""
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        digest = hashlib.sha256(auth_header[7:].encode("utf-8")).hexdigest()[:16]
        return f"token:{digest}"
    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply the limiter to every request except health checks and API docs."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_id = client_key(request)
        allowed, remaining = rate_limiter.is_allowed(client_id)

        if not allowed:
            logger.warning(
                f"Rate limit exceeded for {client_id} on {request.method} {request.url.path}"
            )
            # Exceptions raised inside BaseHTTPMiddleware bypass FastAPI handlers
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": f"Rate limit exceeded. Try again in {settings.RATE_LIMIT_WINDOW_SECONDS} seconds."},
                headers={
                    "Retry-After": str(settings.RATE_LIMIT_WINDOW_SECONDS),
                    "X-RateLimit-Limit": str(settings.RATE_LIMIT_REQUESTS),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(settings.RATE_LIMIT_REQUESTS)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
