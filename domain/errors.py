"""
Error taxonomy shared by services and the HTTP layer.

`AppError` subclasses are client-correctable and carry a stable machine
readable `code` plus the HTTP status the API maps them to. Everything else
(storage failures, `DataIntegrityError`, `ConfigurationError`) is an internal
error: logged, and reported to callers without details.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


class AppError(Exception):
    """Base class for errors that are safe to report to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else None


class ValidationError(AppError):
    """Malformed input or a broken business invariant."""

    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    """A referenced entity does not exist."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Optional[str] = None) -> None:
        if identifier is not None:
            message = f"{resource} with identifier '{identifier}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(message)
        self.resource = resource
        self.identifier = identifier


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized access") -> None:
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden access") -> None:
        super().__init__(message)


class ConflictError(AppError):
    """The request is valid but clashes with the current state of the entity."""

    status_code = 409
    code = "CONFLICT"


class DataIntegrityError(RuntimeError):
    """Stored data violates a cross-entity invariant (e.g. dangling ISP reference)."""


class ConfigurationError(RuntimeError):
    """Raised when runtime configuration cannot be parsed."""


__all__ = [
    "AppError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "DataIntegrityError",
    "ConfigurationError",
]
