# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware package."""

from school_registry.api.middleware.rate_limit import (
    RATE_LIMIT_MESSAGE,
    api_rate_limit,
    create_limiter,
    enforce_rate_limit,
    get_client_identifier,
)
from school_registry.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "RATE_LIMIT_MESSAGE",
    "RequestContextMiddleware",
    "api_rate_limit",
    "create_limiter",
    "enforce_rate_limit",
    "get_client_identifier",
]
