"""Per-request log line and `X-Request-ID` correlation.

The id is stored on `request.state` so chat logs (retries, failures) can be tied back to the
request that caused them. Bodies never reach these logs.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("app.http")

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def resolve_request_id(header_value: str | None) -> str:
    """Reuse a well-formed client id, otherwise mint one."""
    if header_value and _REQUEST_ID_PATTERN.fullmatch(header_value):
        return header_value
    return uuid.uuid4().hex


def _log_fields(request: Request, *, status_code: int, started: float) -> dict[str, Any]:
    route = request.scope.get("route")
    return {
        "request_id": request.state.request_id,
        "http_method": request.method,
        # Route template, never the raw path or query string.
        "request_path": getattr(route, "path", None) or "unmatched",
        "status_code": status_code,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
    }


class HttpLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        request.state.request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled exception while processing request",
                extra=_log_fields(request, status_code=500, started=started),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        logger.info(
            "Request completed",
            extra=_log_fields(request, status_code=response.status_code, started=started),
        )
        return response
