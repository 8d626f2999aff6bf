# backend/app/middleware/structured_logging.py
from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("pgstay.request")


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Emits one structured log line per request with:
      request_id, org_slug, method, path, property_id, status_code, latency_ms

    Must be added before RequestIDMiddleware so it runs inside it and the
    request id ContextVar is still set when the line is written.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        t0 = time.perf_counter()

        # Headers are good enough for the request line; the principal is
        # resolved later inside the handlers.
        org_slug = request.headers.get("X-Org-Slug")

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            latency_ms = int((time.perf_counter() - t0) * 1000)
            log.info(
                "http_request %s %s -> %s (%sms)",
                request.method,
                request.url.path,
                status_code,
                latency_ms,
                extra={
                    "org_slug": org_slug,
                    "property_id": request.query_params.get("property_id"),
                },
            )
