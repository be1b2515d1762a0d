"""
Rate limiting middleware for the Storefront API
Uses in-memory storage with sliding window algorithm
"""
import hashlib
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Tuple

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse


class RateLimiter:
    """
    In-memory rate limiter using sliding window algorithm.

    State is per process; several API instances each keep their own window.
    """

    def __init__(self, window_seconds: int = 60, cleanup_interval: int = 60):
        self.window_seconds = window_seconds
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        # Identifiers with no recent requests are dropped periodically
        self._last_cleanup = time.time()
        self._cleanup_interval = cleanup_interval

    def _cleanup_old_entries(self, now: float):
        """Forget identifiers whose whole window has expired"""
        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = now - self.window_seconds

        for identifier in list(self._requests.keys()):
            window = self._requests[identifier]
            while window and window[0] <= cutoff:
                window.popleft()
            if not window:
                del self._requests[identifier]

        self._last_cleanup = now

    def is_allowed(self, identifier: str, max_requests: int) -> Tuple[bool, int, int]:
        """
        Check if a request is allowed under the rate limit and record it.

        Returns:
            Tuple of (is_allowed, remaining_requests, retry_after_seconds)
        """
        now = time.time()
        self._cleanup_old_entries(now)

        window = self._requests[identifier]

        while window and window[0] <= now - self.window_seconds:
            window.popleft()

        if len(window) >= max_requests:
            retry_after = int(window[0] + self.window_seconds - now) + 1
            return False, 0, retry_after

        window.append(now)
        return True, max_requests - len(window), 0


# Paths that are exempt from rate limiting
EXEMPT_PATHS = {
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware that applies rate limiting based on authentication status.

    Requests carrying a bearer token are counted per token, others per client
    IP, each against its own per-minute limit.

    Headers returned:
    - X-RateLimit-Limit: Maximum requests per window
    - X-RateLimit-Remaining: Remaining requests in current window
    - Retry-After: Seconds until a request is allowed again (when limited)
    """

    def __init__(self, app, authenticated_limit: int, unauthenticated_limit: int):
        super().__init__(app)
        self.authenticated_limit = authenticated_limit
        self.unauthenticated_limit = unauthenticated_limit
        self.limiter = RateLimiter()

    async def dispatch(self, request: Request, call_next):
        # Skip exempt paths and CORS preflight
        if request.url.path in EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        identifier, limit = self._get_identifier_and_limit(request)
        is_allowed, remaining, retry_after = self.limiter.is_allowed(identifier, limit)

        if not is_allowed:
            # Return a response instead of raising so it still passes through CORS
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded. Please slow down."},
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "Retry-After": str(retry_after),
                }
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    def _get_identifier_and_limit(self, request: Request) -> Tuple[str, int]:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token_hash = hashlib.sha256(auth_header.encode()).hexdigest()[:32]
            return f"jwt:{token_hash}", self.authenticated_limit

        return f"ip:{self._get_client_ip(request)}", self.unauthenticated_limit

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        """Get the client IP, considering proxies"""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
