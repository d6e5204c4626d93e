"""Error taxonomy shared by the API handlers and the HTTP client."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "ExpenseTrackerError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "ServiceUnavailableError",
    "ConfigError",
    "error_for_status",
]


class ExpenseTrackerError(RuntimeError):
    """Base class for failures surfaced to API callers."""

    status_code: int = 500


class ValidationError(ExpenseTrackerError):
    """Raised when a request carries missing or malformed input."""

    status_code = 400

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = tuple(fields)


class NotFoundError(ExpenseTrackerError):
    """Raised when an expense id does not exist in the store."""

    status_code = 404


class StorageError(ExpenseTrackerError):
    """Raised when the underlying query fails."""

    status_code = 500


class ServiceUnavailableError(ExpenseTrackerError):
    """Raised by the client when the API cannot be reached at all."""

    status_code = 503


class ConfigError(ExpenseTrackerError):
    """Raised when the configuration file or environment is invalid."""


def error_for_status(status_code: int, message: str) -> ExpenseTrackerError:
    """Map an HTTP error status back onto the matching exception instance."""

    if status_code == ValidationError.status_code:
        return ValidationError(message)
    if status_code == NotFoundError.status_code:
        return NotFoundError(message)
    if status_code >= 500:
        return StorageError(message)
    error = ExpenseTrackerError(message)
    error.status_code = status_code
    return error
