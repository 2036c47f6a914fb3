from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from bistro.core.metrics import service_metrics
from bistro.core.request_context import clear_request_context, set_request_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
ACTOR_HEADER = "X-Actor"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Tags each HTTP request with an id and actor, times it, and logs the outcome."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        actor = actor_from_headers(request)
        request.state.request_id = request_id
        set_request_context(request_id=request_id, actor=actor)

        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            status_code = response.status_code if response is not None else 500
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            service_metrics.observe(request.url.path, request.method, status_code, elapsed_ms)
            logger.info(
                "%s %s -> %s",
                request.method,
                request.url.path,
                status_code,
                extra={
                    "endpoint": request.url.path,
                    "method": request.method,
                    "status_code": status_code,
                    "duration_ms": elapsed_ms,
                },
            )
            if response is not None:
                response.headers[REQUEST_ID_HEADER] = request_id
            clear_request_context()


def actor_from_headers(request: Request) -> str | None:
    raw = (request.headers.get(ACTOR_HEADER) or "").strip()
    return raw[:64] or None
