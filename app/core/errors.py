"""Domain error taxonomy for the Expense Tracker API.

Every error raised by the service layer derives from :class:`TransactionError` and carries
the HTTP status the centralized responder in ``app.api.errors`` should answer with.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str


class TransactionError(Exception):
    """Base class for all errors surfaced by the transaction service."""

    status_code = 500

    def __init__(self, message: str) -> None:
        """Initialize the error with a human-readable message."""
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-serializable response body."""
        return {"message": self.message}


class ValidationError(TransactionError):
    """One or more fields are malformed, missing or out of range."""

    status_code = 400

    def __init__(self, errors: list[FieldError]) -> None:
        """Initialize the error from a non-empty list of field errors."""
        if not errors:
            msg = "ValidationError requires at least one field error"
            raise ValueError(msg)
        super().__init__(errors[0].message)
        self.errors = errors

    @property
    def field(self) -> str:
        """Name of the first offending field."""
        return self.errors[0].field

    def to_dict(self) -> dict[str, Any]:
        """Render the error with the offending field and the full error list."""
        return {
            "message": self.message,
            "field": self.field,
            "errors": [asdict(error) for error in self.errors],
        }


class NotFoundError(TransactionError):
    """No transaction exists with the requested id."""

    status_code = 404


class ForbiddenError(TransactionError):
    """The requested mutation is not allowed, e.g. editing outside the edit window."""

    status_code = 403


class InternalError(TransactionError):
    """Unexpected persistence failure."""

    status_code = 500
