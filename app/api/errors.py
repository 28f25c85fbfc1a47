"""Centralized error responder mapping exceptions to JSON ``{"message": ...}`` responses."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from app.core.errors import FieldError, TransactionError, ValidationError
from app.core.utils import get_logger

logger = get_logger("expense-tracker.api")


def _field_name(loc: tuple) -> str:
    parts = [part for part in loc if isinstance(part, str) and part not in ("body", "query", "path")]
    if not parts:
        return "body"
    return to_camel(parts[-1]) if "_" in parts[-1] else parts[-1]


async def transaction_error_handler(request: Request, exc: TransactionError) -> JSONResponse:
    """Answer a domain error with its own status code and body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed bodies and query parameters as a 400 validation error."""
    errors = [FieldError(_field_name(tuple(err.get("loc", ()))), err.get("msg", "Invalid value")) for err in exc.errors()]
    if not errors:
        errors = [FieldError("body", "Invalid request")]
    logger.warning(f"{request.method} {request.url.path} rejected: {errors[0].field}: {errors[0].message}")
    return JSONResponse(status_code=400, content=ValidationError(errors).to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer any other exception with a generic 500."""
    logger.exception(f"Unhandled error in {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error responders on ``app``."""
    app.add_exception_handler(TransactionError, transaction_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
