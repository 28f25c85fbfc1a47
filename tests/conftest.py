"""Shared fixtures: an in-memory database, a controllable clock, and a test client per test."""

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.api.dependencies import get_clock
from app.core.db import Database
from app.core.settings import Settings
from app.main import create_app
from app.services.transaction_service import TransactionService
from app.services.transaction_store import TransactionStore

NOW = datetime(2025, 6, 30, 12, 0, 0)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a private in-memory database with file logging off."""
    return Settings(_env_file=None, database_url="sqlite://", log_file=None)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def client(settings: Settings, clock: FrozenClock) -> Iterator[TestClient]:
    """Test client running the full application with the frozen clock injected."""
    app = create_app(settings)
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def database(settings: Settings) -> Iterator[Database]:
    db = Database(settings.database_url)
    db.open()
    yield db
    db.close()


@pytest.fixture
def session(database: Database) -> Iterator[Session]:
    db_session = database.session()
    yield db_session
    db_session.close()


@pytest.fixture
def service(session: Session, settings: Settings, clock: FrozenClock) -> TransactionService:
    return TransactionService(TransactionStore(session), settings, clock)


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Build a valid expense payload (JSON keys) with optional overrides."""

    def _make(**overrides: Any) -> dict[str, Any]:
        payload = {
            "type": "expense",
            "amount": 500,
            "category": "Fuel",
            "division": "Personal",
            "account": "Cash",
            "description": "Test petrol",
            "date": (NOW - timedelta(hours=1)).isoformat() + "Z",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def make_fields() -> Callable[..., dict[str, Any]]:
    """Build valid service-level fields (attribute names, datetime values) with optional overrides."""

    def _make(**overrides: Any) -> dict[str, Any]:
        fields = {
            "type": "expense",
            "amount": 500.0,
            "category": "Fuel",
            "division": "Personal",
            "account": "Cash",
            "to_account": None,
            "description": "Test petrol",
            "date": NOW - timedelta(hours=1),
        }
        fields.update(overrides)
        return fields

    return _make
