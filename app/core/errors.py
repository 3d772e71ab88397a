"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    http_status: int
    table: str
    bucket: str
    resource_id: str
    max_value: int
    actual_value: int
    model: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when the caller has no valid session."""


class NotFoundAppError(AppError):
    """Raised when a requested job, company, mapping or file does not exist."""


class BackendAppError(AppError):
    """Raised when the hosted backend rejects a request or cannot be reached."""


class LLMAppError(AppError):
    """Raised when LLM provider/client operations fail."""


class ForbiddenAppError(AppError):
    """Raised when a request targets a resource outside its allowed scope."""


class StorageAppError(AppError):
    """Raised when file storage cannot produce a requested object or URL."""
