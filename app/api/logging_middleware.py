# =============================================================================
# Request Logging Middleware
# =============================================================================
#
# Logs one line per request: method, path, status code, elapsed time.
#
# DESIGN DECISION: Starlette middleware (not a FastAPI dependency) because
# it wraps the ENTIRE request lifecycle, sees the final status code, and no
# endpoint has to opt in.
# =============================================================================

from __future__ import annotations

import logging
import time

from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Endpoints to skip (health check, docs)
_SKIP_PATHS = {"/api/health", "/docs", "/redoc", "/openapi.json"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.monotonic()
        response = await call_next(request)
        elapsed_ms = int((time.monotonic() - start_time) * 1000)

        logger.info(
            "%s %s -> %d (%d ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
