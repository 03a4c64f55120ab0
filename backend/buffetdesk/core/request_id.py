"""
Request ID Middleware

Reads ``X-Request-Id`` (or generates one), exposes it as
``request.state.request_id``, echoes it back and logs one line per request.
"""
import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("buffetdesk.access")

REQUEST_ID_HEADER = "X-Request-Id"


def get_request_id(request: Request):
    return getattr(request.state, "request_id", None)


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        request_id = incoming or str(uuid.uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level, "%s %s -> %s (%.1f ms) request_id=%s",
            request.method, request.url.path, response.status_code, elapsed_ms, request_id
        )
        return response
