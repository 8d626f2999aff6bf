# backend/app/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# ids from upstream proxies end up in every JSON log line; keep them short and plain
_ACCEPTED_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")

request_id_ctx: ContextVar[Optional[str]] = ContextVar("pgstay_request_id", default=None)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


def resolve_request_id(incoming: Optional[str]) -> str:
    """Reuse a caller-supplied id when it looks sane, otherwise mint a fresh one."""
    candidate = (incoming or "").strip()
    if _ACCEPTED_ID.match(candidate):
        return candidate
    return uuid.uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds one id to the request for its log lines and echoes it back as X-Request-ID."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # starlette headers are case-insensitive, so X-Request-Id matches too
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
