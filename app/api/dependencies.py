"""FastAPI dependencies for DI (settings, DB session, clock, service).

The database handle and settings live on ``app.state`` and are set up by the application lifespan,
so tests can swap any of these by overriding the dependency.
"""

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.db import Database
from app.core.settings import Settings
from app.core.utils import utcnow
from app.services.transaction_service import Clock, TransactionService
from app.services.transaction_store import TransactionStore


def get_settings(request: Request) -> Settings:
    """Provide the settings the application was created with."""
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Provide the application's database handle."""
    return request.app.state.database


def get_db_session(database: Database = Depends(get_database)) -> Iterator[Session]:
    """Provide a session scoped to the current request."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


def get_clock() -> Clock:
    """Provide the clock used for timestamps and the edit window."""
    return utcnow


def get_transaction_service(
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> TransactionService:
    """Provide a TransactionService bound to the request's session."""
    return TransactionService(TransactionStore(session), settings, clock)
