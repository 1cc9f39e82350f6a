"""
Tastebook - Error types.

Services raise these; the web layer turns them into error notifications.
"""

from postgrest.exceptions import APIError

# PostgREST code for ".single()" on an empty result
NO_ROWS_CODE = "PGRST116"


class TastebookError(Exception):
    """Base class for errors surfaced to the user."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TastebookError):
    status_code = 404


class PermissionDeniedError(TastebookError):
    status_code = 403


class InvalidInputError(TastebookError):
    status_code = 422


class AuthenticationError(TastebookError):
    status_code = 401


class StorageError(TastebookError):
    status_code = 502


class BackendError(TastebookError):
    """The backing store rejected or failed a request."""

    status_code = 502


def is_no_rows(error: APIError) -> bool:
    """True when a PostgREST error only means "no matching row"."""
    return getattr(error, "code", None) == NO_ROWS_CODE


def backend_error(action: str, error: Exception) -> BackendError:
    """Wrap a store error with a user-facing message."""
    detail = getattr(error, "message", None) or str(error)
    return BackendError(f"Error {action}: {detail}")
