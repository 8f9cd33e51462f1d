"""Request tracing and HTTP latency middleware"""

import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from savelo_gateway.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID when sane, otherwise mint one"""

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        if not incoming or len(incoming) > MAX_REQUEST_ID_LENGTH:
            incoming = uuid.uuid4().hex
        request.state.request_id = incoming

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = incoming
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)

        # Label by route template so plan ids do not explode cardinality
        route = request.scope.get("route")
        request_duration_histogram.labels(
            method=request.method,
            endpoint=getattr(route, "path", "unmatched"),
            status=response.status_code,
        ).observe(time.perf_counter() - started)
        return response
