"""Application error types and database error translation."""

from typing import Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError

EMAIL_IN_USE = "This email address is already in use"
PHONE_IN_USE = "This phone number is already in use"
DUPLICATE_RECORD = "Record already exists, please do not submit twice"
MISSING_RELATED_RECORD = "Related record does not exist"
DATABASE_UNAVAILABLE = "Database is unavailable, please try again later"
OPERATION_FAILED = "Operation failed, please try again later"

# Substrings of driver messages (PostgreSQL constraint names, SQLite column paths)
_CUSTOMER_EMAIL_MARKERS = ("uq_customers_email", "customers.email")
_CUSTOMER_PHONE_MARKERS = ("uq_customers_phone", "customers.phone")
_UNIQUE_MARKERS = ("unique constraint", "duplicate key")
_FOREIGN_KEY_MARKERS = ("foreign key constraint",)


class AppError(Exception):
    """Base class for errors reported to API callers."""

    status_code = 500

    def __init__(self, message: str, details: Optional[list[dict]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    """Malformed or out-of-range input."""

    status_code = 400

    @classmethod
    def for_field(cls, field: str, message: str, summary: str = "Request validation failed"):
        return cls(summary, details=[{"field": field, "message": message}])


class NotFoundError(AppError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(AppError):
    """A unique value is already taken."""

    status_code = 400


class UnavailableError(AppError):
    """A dependency (database, blob store) is unreachable or misconfigured."""

    status_code = 500


class InternalError(AppError):
    """Anything unexpected. Callers only ever see the generic message."""

    status_code = 500

    def __init__(self, message: str = OPERATION_FAILED):
        super().__init__(message)


def translate_db_error(error: SQLAlchemyError) -> AppError:
    """
    Map a database exception to a user-facing application error.

    Driver messages never reach the client; known constraint failures get a
    friendly message and everything else falls back to a generic one.

    Args:
        error: Exception raised by SQLAlchemy

    Returns:
        Application error to report to the caller
    """
    raw = str(getattr(error, "orig", None) or error).lower()

    if isinstance(error, IntegrityError) or any(marker in raw for marker in _UNIQUE_MARKERS):
        if any(marker in raw for marker in _CUSTOMER_EMAIL_MARKERS):
            return ConflictError(EMAIL_IN_USE)
        if any(marker in raw for marker in _CUSTOMER_PHONE_MARKERS):
            return ConflictError(PHONE_IN_USE)
        if any(marker in raw for marker in _UNIQUE_MARKERS):
            return ConflictError(DUPLICATE_RECORD)
        if any(marker in raw for marker in _FOREIGN_KEY_MARKERS):
            return NotFoundError(MISSING_RELATED_RECORD)
        return InternalError()

    if isinstance(error, OperationalError) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        return UnavailableError(DATABASE_UNAVAILABLE)

    return InternalError()
