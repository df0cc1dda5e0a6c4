"""Per-request access logging.

Every response carries an ``X-Request-ID`` header (the incoming one when the
client supplied it). Request and response bodies are never logged.
"""
from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger("arivelab.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        start = time.monotonic()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        client = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = int((time.monotonic() - start) * 1000)
            logger.exception(
                "%s %s failed after %dms [client=%s request_id=%s]",
                request.method,
                request.url.path,
                duration_ms,
                client,
                request_id,
            )
            raise

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "%s %s -> %d in %dms [client=%s request_id=%s]",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            client,
            request_id,
        )
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response


__all__ = ["REQUEST_ID_HEADER", "RequestLoggingMiddleware"]
