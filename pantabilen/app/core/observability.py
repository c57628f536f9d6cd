"""
Logging setup and request tracing.

Every request gets a correlation ID (taken from X-Correlation-ID or
generated), echoed back in the response together with X-Process-Time, and
one log line with method, path, status and duration.
"""

import logging
import time
import uuid
from typing import Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from pantabilen.app.core.config import settings

logger = logging.getLogger("pantabilen")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
CORRELATION_HEADER = "X-Correlation-ID"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the application process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        started = time.perf_counter()
        
        response = await call_next(request)
        
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = str(duration_ms)
        
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            "%s %s -> %s (%.2f ms) [%s]",
            request.method, request.url.path, response.status_code, duration_ms, correlation_id,
            extra={
                "correlation_id": correlation_id,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        return response
