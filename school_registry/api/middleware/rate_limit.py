# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting for the ``/api`` routes using slowapi.

Every route under ``/api`` shares one per-client window (100 requests per
15 minutes by default), enforced by the enforce_rate_limit dependency on the
``/api`` router. Clients are identified by IP address. Routes mounted outside
that router (``/``, ``/docs``, ``/redoc``, ``/openapi.json``) are not counted.

Example:
    >>> app.state.limiter = create_limiter(settings)
    >>> api_router = APIRouter(prefix="/api", dependencies=[Depends(enforce_rate_limit)])
"""

import logging

from fastapi import HTTPException, Request, status
from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from school_registry.core.config import Settings

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Args:
        request: HTTP request.

    Returns:
        Client identifier string.
    """
    return f"ip:{get_remote_address(request)}"


def create_limiter(settings: Settings) -> Limiter:
    """Create the limiter holding the window counters for one application.

    Args:
        settings: Application settings containing rate limit configuration.

    Returns:
        Configured Limiter; disabled when rate limiting is switched off.
    """
    limit = settings.rate_limit.limit_string
    logger.info(
        "Rate limiting %s (%s)",
        "enabled" if settings.rate_limit.enabled else "disabled",
        limit,
    )
    return Limiter(
        key_func=get_client_identifier,
        storage_uri="memory://",
        enabled=settings.rate_limit.enabled,
    )


def api_rate_limit(settings: Settings) -> RateLimitItem:
    """Parse the configured window into a limits item."""
    return parse(settings.rate_limit.limit_string)


async def enforce_rate_limit(request: Request) -> None:
    """Count the request against the client's window.

    Raises:
        HTTPException: 429 once the client has used up its window.
    """
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return

    client = get_client_identifier(request)
    if not limiter.limiter.hit(request.app.state.rate_limit, "api", client):
        logger.warning("Rate limit exceeded for %s on %s", client, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=RATE_LIMIT_MESSAGE,
        )
