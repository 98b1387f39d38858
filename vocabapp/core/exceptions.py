"""
Application exceptions. Mapped to HTTP responses in ``vocabapp.main``.
"""
from typing import Optional


class VocabAppException(Exception):
    """Base exception for all application errors."""

    default_code = "ERROR"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(VocabAppException):
    """Raised when caller input is rejected."""

    default_code = "VALIDATION_ERROR"


class ImportValidationError(ValidationError):
    """Raised when an import request is rejected before a job is created."""


class NotFoundError(VocabAppException):
    """Raised when a requested resource is not found or not owned by the caller."""

    default_code = "NOT_FOUND"


class ConflictError(VocabAppException):
    """Raised when there's a conflict (e.g., duplicate entry)."""

    default_code = "CONFLICT"


class AuthenticationError(VocabAppException):
    """Raised when the caller identity or credential is missing or wrong."""

    default_code = "UNAUTHORIZED"


class AuthorizationError(VocabAppException):
    """Raised when the caller may not act on a resource."""

    default_code = "FORBIDDEN"
