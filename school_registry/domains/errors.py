# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by the entity stores and the enrollment service.

Every failure a caller can act on is one of four kinds; the API layer maps
each kind to a status code and a response envelope. Anything else is an
internal error.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

# Pydantic error types rendered with a fixed wording
_REQUIRED_TYPES = {"missing", "null_required"}


class RegistryError(Exception):
    """Base exception for registry domain errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RegistryError):
    """Raised when one or more field constraints are violated.

    Attributes:
        field_errors: Mapping of field path to message, one per field.
    """

    def __init__(
        self,
        field_errors: dict[str, str],
        message: str = "Validation error",
    ) -> None:
        super().__init__(message)
        self.field_errors = field_errors

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Convert a pydantic validation failure into field messages.

        Only the first message per field is kept. Locations use the wire
        (camelCase) names and nested fields are dotted, e.g. ``address.zipCode``.

        Args:
            exc: Pydantic validation error.

        Returns:
            ValidationError with one message per violated field.
        """
        field_errors: dict[str, str] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__root__"
            if field in field_errors:
                continue
            field_errors[field] = _render_message(field, error)
        return cls(field_errors)


class DuplicateKeyError(RegistryError):
    """Raised when a unique field (email) collides with an existing record."""

    pass


class NotFoundError(RegistryError):
    """Raised when an id does not resolve to a live record."""

    pass


class BadRequestError(RegistryError):
    """Raised for a missing operation parameter or an invalid transition."""

    pass


def _render_message(field: str, error: Any) -> str:
    """Produce the message for one pydantic error entry."""
    error_type = error["type"]
    ctx = error.get("ctx") or {}

    if error_type in _REQUIRED_TYPES:
        return f"{field} is required"
    if error_type == "string_too_short" and ctx.get("min_length") == 1:
        return f"{field} is required"
    if error_type == "string_too_long":
        return f"{field} cannot exceed {ctx.get('max_length')} characters"
    if error_type == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return f"{field}: {error['msg']}"
