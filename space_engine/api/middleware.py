"""
Request id propagation and access logging.

Every request carries an id, taken from the caller's ``X-Request-ID`` or
generated. It is echoed on the response, attached to error bodies and
available to any code on the request path via ``get_request_id``.
"""

import logging
import time
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

# Searches that reach the external geocoder are the usual slow path
SLOW_REQUEST_SECONDS = 2.0

_request_id: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    return _request_id.get()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and flags slow ones."""

    def __init__(self, app, slow_request_seconds: float = SLOW_REQUEST_SECONDS):
        super().__init__(app)
        self._slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next) -> Response:
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        token = _request_id.set(req_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"[{req_id}] {request.method} {request.url.path} failed after "
                f"{time.perf_counter() - started:.3f}s"
            )
            raise
        finally:
            _request_id.reset(token)

        elapsed = time.perf_counter() - started
        line = f"[{req_id}] {request.method} {request.url.path} -> {response.status_code} in {elapsed:.3f}s"
        if elapsed >= self._slow_request_seconds:
            logger.warning(f"{line} (slow)")
        else:
            logger.info(line)

        response.headers[REQUEST_ID_HEADER] = req_id
        return response
