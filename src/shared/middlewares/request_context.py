"""Middleware for request IDs and per-request access logging."""

import logging
import time
from collections.abc import Callable
from uuid import uuid4

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID and log every request with its outcome.

    An incoming ``X-Request-ID`` header is reused, otherwise a new UUID is
    generated. The ID is stored in ``request.state.request_id``, bound into
    the structlog context so every log line of the request carries it, and
    echoed on the response. The completion line names the user when the auth
    gateway authenticated the request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        client_ip = request.client.host if request.client else None
        logger.info(f"Incoming request {request.method} {request.url.path} from {client_ip}")

        try:
            response: Response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            if response.status_code >= 500:
                level = logging.ERROR
            elif response.status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO

            # Set by the auth gateway on protected routes
            identity = getattr(request.state, "identity", None)
            user = f" user_id={identity.user_id} renewed={identity.renewed}" if identity else ""

            logger.log(
                level,
                f"Request completed {request.method} {request.url.path} "
                f"status={response.status_code} duration_ms={duration_ms:.1f}{user}",
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()
