import time
import uuid

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import current_request

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Keep the current Request in context for services and tag log lines with a request id."""

    async def dispatch(self, request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        token = current_request.set(request)
        started = time.perf_counter()
        try:
            with logger.contextualize(request_id=request_id):
                response = await call_next(request)
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.info(
                    f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
                )
        finally:
            current_request.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
