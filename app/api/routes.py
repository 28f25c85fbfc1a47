"""FastAPI endpoints for the Expense Tracker API.

This module defines the transaction routes (create, list, fetch, edit, delete, and the two summaries)
and the service status routes. Handlers stay thin: they translate HTTP input into service calls and
leave every rule, and every error, to the service layer and the centralized error responder.
"""

import time

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.dependencies import get_database, get_settings, get_transaction_service
from app.core.db import Database
from app.core.models import (
    CategorySummary,
    HealthStatus,
    MessageResponse,
    MonthlySummary,
    TransactionOut,
    TransactionPayload,
)
from app.core.settings import Settings
from app.services.transaction_service import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])
status_router = APIRouter(tags=["status"])

VALIDATION_ERROR_EXAMPLE = {
    "message": "Amount must be greater than 0",
    "field": "amount",
    "errors": [{"field": "amount", "message": "Amount must be greater than 0"}],
}
NOT_FOUND_RESPONSE = {
    "model": MessageResponse,
    "description": "Transaction not found.",
    "content": {"application/json": {"example": {"message": "Transaction not found"}}},
}
VALIDATION_RESPONSE = {
    "description": "A field is missing, malformed or out of range.",
    "content": {"application/json": {"example": VALIDATION_ERROR_EXAMPLE}},
}


@router.get(
    "",
    response_model=list[TransactionOut],
    summary="List transactions",
    description=(
        "List transactions newest first. Filters are combined with AND.\n\n"
        "**Query parameters:**\n"
        "- `division`: `Office` or `Personal`.\n"
        "- `category`: exact category name.\n"
        "- `startDate`, `endDate`: inclusive date range, applied only when both are given. "
        "A bare date (`YYYY-MM-DD`) covers the whole day.\n"
        "- `page` (default 1), `limit` (default 100).\n\n"
        "The total number of matches is returned in the `X-Total-Count` header."
    ),
    responses={400: VALIDATION_RESPONSE},
)
def list_transactions(
    response: Response,
    division: str | None = None,
    category: str | None = None,
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    page: int = 1,
    limit: int | None = None,
    service: TransactionService = Depends(get_transaction_service),
) -> list[TransactionOut]:
    """List transactions with filters and pagination."""
    records, total = service.list_transactions(
        division=division,
        category=category,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    response.headers["X-Total-Count"] = str(total)
    return [TransactionOut.model_validate(record) for record in records]


@router.post(
    "",
    status_code=201,
    response_model=TransactionOut,
    summary="Create a transaction",
    description=(
        "Record an income, expense or transfer. String fields are trimmed. "
        "Transfers need a `toAccount` different from `account`; the `date` cannot be in the future."
    ),
    responses={400: VALIDATION_RESPONSE},
)
def create_transaction(
    payload: TransactionPayload,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionOut:
    """Create a new transaction."""
    record = service.create(payload.model_dump())
    return TransactionOut.model_validate(record)


@router.get(
    "/summary/category",
    response_model=list[CategorySummary],
    summary="Totals by type and category",
    description="Sum and count of all transactions grouped by type and category, largest total first.",
)
def summary_by_category(service: TransactionService = Depends(get_transaction_service)) -> list[CategorySummary]:
    """Aggregate transactions by type and category."""
    return service.summary_by_category()


@router.get(
    "/summary/monthly",
    response_model=list[MonthlySummary],
    summary="Totals by month and type",
    description="Sum and count of all transactions grouped by calendar month and type, most recent month first.",
)
def summary_by_month(service: TransactionService = Depends(get_transaction_service)) -> list[MonthlySummary]:
    """Aggregate transactions by calendar month and type."""
    return service.summary_by_month()


@router.get(
    "/{transaction_id}",
    response_model=TransactionOut,
    summary="Fetch a transaction",
    responses={404: NOT_FOUND_RESPONSE},
)
def get_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionOut:
    """Fetch a single transaction by id."""
    return TransactionOut.model_validate(service.get(transaction_id))


@router.put(
    "/{transaction_id}",
    response_model=TransactionOut,
    summary="Edit a transaction",
    description=(
        "Overwrite some or all fields of a transaction. Only allowed within 12 hours of its creation; "
        "`id` and `createdAt` can never be changed."
    ),
    responses={
        400: VALIDATION_RESPONSE,
        403: {
            "model": MessageResponse,
            "description": "The edit window has closed.",
            "content": {"application/json": {"example": {"message": "Editing is restricted after 12 hours"}}},
        },
        404: NOT_FOUND_RESPONSE,
    },
)
def update_transaction(
    transaction_id: str,
    payload: TransactionPayload,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionOut:
    """Edit a transaction inside its edit window."""
    record = service.update(transaction_id, payload.model_dump(exclude_unset=True))
    return TransactionOut.model_validate(record)


@router.delete(
    "/{transaction_id}",
    response_model=MessageResponse,
    summary="Delete a transaction",
    responses={404: NOT_FOUND_RESPONSE},
)
def delete_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
) -> MessageResponse:
    """Permanently delete a transaction."""
    service.delete(transaction_id)
    return MessageResponse(message="Transaction deleted successfully")


@status_router.get("/", summary="Service status")
def root(
    settings: Settings = Depends(get_settings),
    database: Database = Depends(get_database),
) -> dict:
    """Report that the API is running."""
    return {
        "message": f"{settings.app_name} is running",
        "version": settings.app_version,
        "status": "healthy",
        "database": "connected" if database.ping() else "disconnected",
    }


@status_router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health check",
    responses={
        200: {
            "description": "API is healthy.",
            "content": {"application/json": {"example": {"status": "ok", "database": "connected", "uptime": 42.5}}},
        }
    },
)
def health(request: Request, database: Database = Depends(get_database)) -> HealthStatus:
    """Health check endpoint; ``uptime`` is seconds since the application was built."""
    return HealthStatus(
        status="ok",
        database="connected" if database.ping() else "disconnected",
        uptime=round(time.monotonic() - request.app.state.started_at, 3),
    )
