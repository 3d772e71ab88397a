"""HTTP middleware for request correlation.

Every response carries the request id (client supplied or generated) and
the handling time; the id is also visible to every log record emitted while
the request is processed.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

_MAX_REQUEST_ID_LENGTH = 128


def _incoming_request_id(request: Request, header_name: str) -> str:
    value = (request.headers.get(header_name) or "").strip()
    if not value or len(value) > _MAX_REQUEST_ID_LENGTH:
        return str(uuid.uuid4())
    return value


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a correlation id and duration header to every response.

    The id comes from the configured header (``LOG_REQUEST_ID_HEADER``,
    default ``X-Request-ID``) when present, otherwise a UUID4 is generated.
    It lives in a context variable for the duration of the request only.

    Response headers added:
        - ``X-Request-ID`` (or the configured name)
        - ``X-Request-Duration-ms``
    """
    header_name = settings.log.request_id_header
    request_id = _incoming_request_id(request, header_name)
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
