# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers mapping failures to the error envelope.

Mapping:
    ValidationError -> 400 with per-field errors
    DuplicateKeyError -> 400
    NotFoundError -> 404
    BadRequestError -> 400
    RequestValidationError -> 400 with per-field errors
    HTTPException -> its status ("Route not found" for unknown paths)
    anything else -> 500, detail only in debug mode
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_registry.core.config import Settings
from school_registry.domains.errors import (
    BadRequestError,
    DuplicateKeyError,
    NotFoundError,
    RegistryError,
    ValidationError,
)
from school_registry.models.common import ErrorResponse, FieldError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[RegistryError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    DuplicateKeyError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    BadRequestError: status.HTTP_400_BAD_REQUEST,
}


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
        status_code = _status_for(exc)
        errors = None
        if isinstance(exc, ValidationError):
            errors = [
                FieldError(field=field, message=message)
                for field, message in exc.field_errors.items()
            ]
        logger.info(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )
        return _envelope(status_code, ErrorResponse(message=exc.message, errors=errors))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning("Request validation error on %s: %s", request.url.path, exc.errors())
        errors = [
            FieldError(
                field=".".join(str(part) for part in error["loc"] if part != "body"),
                message=error["msg"],
            )
            for error in exc.errors()
        ]
        return _envelope(
            status.HTTP_400_BAD_REQUEST,
            ErrorResponse(message="Validation error", errors=errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            message = "Route not found"
        else:
            message = str(exc.detail)
        return _envelope(exc.status_code, ErrorResponse(message=message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return _envelope(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(
                message="Internal server error",
                error=str(exc) if settings.debug else "Something went wrong",
            ),
        )


def _status_for(exc: RegistryError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def _envelope(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump())
