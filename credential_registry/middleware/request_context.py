"""Request context middleware: request IDs, caller attribution, timing.

Two ContextVars carry per-request state through the async call chain
without threading it through every function signature:

  request_id_var  set here, from X-Request-ID or a fresh UUID
  caller_var      set by require_user once the bearer token is verified;
                  visible to the endpoint and the service it calls

Both live in core/logging.py.  RequestContextFilter, installed on the log
handler by setup_logging, copies them onto every LogRecord, so a line
logged deep inside the registry service ("Rejected duplicate type ...")
can be tied back to the request and the identity that caused it.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from credential_registry.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, log one summary line.

    The X-Request-ID response header echoes the ID so clients can quote
    it when reporting a failed registration.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
