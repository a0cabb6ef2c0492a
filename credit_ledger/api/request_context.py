"""Request Context Middleware — request ids and access logging.

Invariants:
    - Every response carries X-Request-ID (client-supplied or generated)
    - request_id_var is reset after the request, even on failure
    - One access log line per request with status and duration

Design Decisions:
    - BaseHTTPMiddleware: the request id must be set before routing so error
      handlers and services log it too
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from credit_ledger.infrastructure.observability import request_id_var

logger = logging.getLogger("credit_ledger.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and logs request completion."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:16]
        token = request_id_var.set(request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            level = logging.INFO if response.status_code < 400 else logging.WARNING
            logger.log(
                level,
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)
