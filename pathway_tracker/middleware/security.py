"""
Security Middleware
Response hardening headers and per-client request throttling
"""

import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

import structlog
from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from pathway_tracker.core.config import settings
from pathway_tracker.core.security import decode_access_token

logger = structlog.get_logger()

WINDOW_SECONDS = 60

# Probes and docs are never throttled
EXEMPT_PATHS = frozenset({"/health", "/", "/docs", "/redoc", "/openapi.json"})

# JSON-only API: nothing may be framed or load sub-resources
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none';",
    "API-Version": "v1",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if request.method == "OPTIONS":
            return response

        response.headers.update(SECURITY_HEADERS)
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        if "server" in response.headers:
            del response.headers["server"]
        return response


class SlidingWindowLimiter:
    """
    Counts hits per key over the trailing ``window`` seconds

    Keys with no hits inside the window are dropped on the next sweep.
    """

    def __init__(self, limit: int, window: float = WINDOW_SECONDS):
        self.limit = limit
        self.window = window
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_sweep = time.monotonic()

    def _expire(self, hits: Deque[float], now: float) -> None:
        while hits and hits[0] <= now - self.window:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._hits):
            self._expire(self._hits[key], now)
            if not self._hits[key]:
                del self._hits[key]
        self._last_sweep = now

    def hit(self, key: str, now: Optional[float] = None) -> Optional[int]:
        """
        Record one hit for ``key``

        Returns:
            Remaining allowance, or None when the key is over its limit
            (the rejected hit is not recorded)
        """
        now = time.monotonic() if now is None else now
        if now - self._last_sweep > self.window:
            self._sweep(now)

        hits = self._hits[key]
        self._expire(hits, now)
        if len(hits) >= self.limit:
            return None

        hits.append(now)
        return self.limit - len(hits)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Throttle by user when a valid access token is presented, by client IP otherwise
    """

    def __init__(self, app, calls_per_minute: Optional[int] = None):
        super().__init__(app)
        self.calls_per_minute = calls_per_minute or settings.RATE_LIMIT_PER_MINUTE
        self.limiter = SlidingWindowLimiter(self.calls_per_minute)

    @staticmethod
    def client_key(request: Request) -> str:
        authorization = request.headers.get("Authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            try:
                return f"user:{decode_access_token(token).subject}"
            except HTTPException:
                pass

        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return f"ip:{forwarded_for.split(',')[0].strip()}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = self.client_key(request)
        remaining = self.limiter.hit(key)
        reset_at = str(int(time.time() + WINDOW_SECONDS))

        if remaining is None:
            logger.warning(
                "Rate limit exceeded",
                client_id=key,
                limit=self.calls_per_minute,
                path=request.url.path
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Rate limit exceeded",
                    "message": f"Maximum {self.calls_per_minute} requests per minute allowed",
                    "retry_after": WINDOW_SECONDS
                },
                headers={"Retry-After": str(WINDOW_SECONDS), "X-RateLimit-Reset": reset_at}
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.calls_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = reset_at
        return response
