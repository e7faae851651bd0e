# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Server entry point: ``school-registry``.

Runs the application factory under uvicorn on the configured host and port.
"""

import uvicorn

from school_registry.core.config import get_settings


def main() -> None:
    """Start the API server."""
    settings = get_settings()
    uvicorn.run(
        "school_registry.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
