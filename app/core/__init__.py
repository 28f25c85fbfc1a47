"""Core package: provides models, database handle, settings, errors, and shared utilities."""

from .db import Database, TransactionRecord  # noqa: F401
from .errors import ForbiddenError, InternalError, NotFoundError, TransactionError, ValidationError  # noqa: F401
from .models import TransactionOut, TransactionPayload  # noqa: F401
from .settings import Settings  # noqa: F401
