"""API package: provides FastAPI dependencies, error responders, and route definitions for the application."""

from .dependencies import get_clock, get_settings, get_transaction_service  # noqa: F401
from .errors import register_exception_handlers  # noqa: F401
from .routes import router, status_router  # noqa: F401
