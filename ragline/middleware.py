"""
Name: Request Correlation Middleware

Responsibilities:
  - Accept a caller's X-Request-Id or mint one, and echo it back
  - Bind the request scope so pipeline logs carry the id
  - Log one completion line per request and feed the request metrics

Collaborators:
  - context.py: bind_request / release_request
  - metrics.py: record_request_metrics
"""

import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .context import bind_request, release_request
from .logger import logger
from .metrics import record_request_metrics

REQUEST_ID_HEADER = "X-Request-Id"

# R: Inbound ids end up in logs and headers; keep them short and printable
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def resolve_request_id(header_value: str | None) -> str:
    if header_value and _VALID_REQUEST_ID.fullmatch(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = bind_request(request_id, request.method, request.url.path)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            logger.exception("unhandled error while serving request")
            raise
        finally:
            elapsed = time.perf_counter() - started
            logger.info(
                "request completed",
                extra={
                    "status_code": status_code,
                    "latency_ms": round(elapsed * 1000, 2),
                },
            )
            record_request_metrics(
                endpoint=request.url.path,
                method=request.method,
                status_code=status_code,
                latency_seconds=elapsed,
            )
            release_request(token)
