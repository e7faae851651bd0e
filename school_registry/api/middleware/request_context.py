# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request context middleware.

Binds a request id, the method and the path to the logging context for the
duration of each request, so every log line emitted while handling it
carries them. The id is taken from ``X-Request-ID`` when the client sends
one and echoed back in the response.
"""

import logging
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from school_registry.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware binding per-request logging context.

    Example:
        >>> app.add_middleware(RequestContextMiddleware)
        >>> # Log lines include request_id, method and path
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Bind context, handle the request, then clear the context.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler.

        Returns:
            HTTP response carrying the request id header.
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        bind_context(request_id=request_id, method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.debug("Request completed with status %d", response.status_code)
            return response
        finally:
            clear_context()
