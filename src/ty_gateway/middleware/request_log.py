"""Request logging middleware.

Each request gets a correlation id: a well-formed inbound X-Request-ID (the
bot relay and load balancer send one) is reused, anything else is replaced
by a fresh `req_<12 hex>`. The id is put on request.state for ApiResponse,
echoed back as X-Request-ID, and logged with method, path, status and latency.

Log format:
    INFO [POST] /api/v1/accounts/42/mine -> 429 (4ms) req_a1b2c3d4e5f6
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("ty.request")

REQUEST_ID_HEADER = "X-Request-ID"
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9_\-]{8,64}$")


def resolve_request_id(inbound: str | None) -> str:
    if inbound and _VALID_REQUEST_ID.match(inbound):
        return inbound
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s -> unhandled (%.0fms) %s",
                request.method, request.url.path,
                (time.perf_counter() - start) * 1000, request_id,
            )
            raise

        logger.info(
            "[%s] %s -> %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
