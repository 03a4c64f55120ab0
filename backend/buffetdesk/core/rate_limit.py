"""
Rate Limiting Middleware

In-memory sliding window per (route, client). Write operations and the
auth endpoints are limited; plain reads pass through.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from collections import defaultdict, deque
from typing import Deque, Dict, Optional, Tuple
import threading
import time
import logging

logger = logging.getLogger(__name__)

# path prefix -> (max requests, window seconds); first match wins
DEFAULT_LIMITS = (
    ('/api/login', (5, 60)),
    ('/api/register', (3, 300)),
    ('/api/inventory/movements', (60, 60)),
)
DEFAULT_LIMIT = (100, 60)


class RateLimiter:
    """Thread-safe sliding-window limiter. Single-process only."""

    def __init__(self, limits=DEFAULT_LIMITS, default=DEFAULT_LIMIT):
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()
        self.limits = limits
        self.default = default

    @staticmethod
    def _client_ip(request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip
        if request.client:
            return request.client.host
        return "unknown"

    def _limit_for(self, path: str) -> Tuple[str, Tuple[int, int]]:
        for prefix, limit in self.limits:
            if path.startswith(prefix):
                return prefix, limit
        return 'default', self.default

    def is_allowed(self, request: Request) -> Tuple[bool, Optional[Dict]]:
        """
        Check if the request is allowed under rate limiting rules.

        Returns:
            Tuple of (is_allowed, rate_limit_info)
        """
        path = request.url.path
        bucket, (limit, window) = self._limit_for(path)

        # Reads are free except on the auth endpoints
        if request.method in ('GET', 'HEAD', 'OPTIONS') and bucket == 'default':
            return True, None

        key = f"{bucket}:{self._client_ip(request)}"
        now = time.monotonic()

        with self._lock:
            timestamps = self._requests[key]
            while timestamps and timestamps[0] <= now - window:
                timestamps.popleft()

            if len(timestamps) >= limit:
                retry_after = max(1, int(timestamps[0] + window - now))
                logger.warning("Rate limit exceeded for %s: %s/%s requests", key, len(timestamps), limit)
                return False, {'limit': limit, 'remaining': 0, 'retry_after': retry_after}

            timestamps.append(now)
            return True, {'limit': limit, 'remaining': limit - len(timestamps), 'reset': window}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """FastAPI middleware for rate limiting"""

    def __init__(self, app, enabled: bool = True):
        super().__init__(app)
        self.enabled = enabled
        self.rate_limiter = RateLimiter()

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or not request.url.path.startswith('/api/'):
            return await call_next(request)

        is_allowed, rate_info = self.rate_limiter.is_allowed(request)

        if not is_allowed:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    'code': 'RATE_LIMITED',
                    'message': 'Too many requests. Please try again later.',
                    'requestId': getattr(request.state, 'request_id', None),
                },
                headers={
                    'Retry-After': str(rate_info['retry_after']),
                    'X-RateLimit-Limit': str(rate_info['limit']),
                    'X-RateLimit-Remaining': '0',
                }
            )

        response = await call_next(request)

        if rate_info:
            response.headers['X-RateLimit-Limit'] = str(rate_info['limit'])
            response.headers['X-RateLimit-Remaining'] = str(rate_info['remaining'])
            response.headers['X-RateLimit-Reset'] = str(rate_info['reset'])

        return response
