"""Persistence for transactions on top of a SQLAlchemy session.

The store is the only component that talks to the database. It exposes the small query surface the
service needs (find, count, insert, find by id, save, delete by id, and the two aggregations) and
turns any SQLAlchemy failure into an :class:`InternalError` after rolling the session back, so a
failed request never leaves a half-applied write behind.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import extract, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.db import TransactionRecord
from app.core.errors import InternalError
from app.core.utils import get_logger

logger = get_logger("expense-tracker.store")


@dataclass(frozen=True)
class TransactionFilter:
    """Conditions ANDed together when listing transactions. ``None`` means unconstrained."""

    division: str | None = None
    category: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    def clauses(self) -> list[Any]:
        """Build the SQL WHERE clauses for this filter."""
        clauses = []
        if self.division:
            clauses.append(TransactionRecord.division == self.division)
        if self.category:
            clauses.append(TransactionRecord.category == self.category)
        if self.start is not None and self.end is not None:
            clauses.append(TransactionRecord.date >= self.start)
            clauses.append(TransactionRecord.date <= self.end)
        return clauses


class TransactionStore:
    """Transaction persistence over a single SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a session owned by the caller."""
        self.session = session

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception(f"Database error while trying to {action}")
            msg = f"Failed to {action}"
            raise InternalError(msg) from exc

    def find(self, filters: TransactionFilter, skip: int = 0, limit: int | None = None) -> list[TransactionRecord]:
        """Return matching transactions, newest ``date`` first."""
        stmt = (
            select(TransactionRecord)
            .where(*filters.clauses())
            .order_by(TransactionRecord.date.desc(), TransactionRecord.created_at.desc(), TransactionRecord.id)
            .offset(skip)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._guard("list transactions"):
            return list(self.session.scalars(stmt))

    def count(self, filters: TransactionFilter) -> int:
        """Return the number of transactions matching ``filters``."""
        stmt = select(func.count()).select_from(TransactionRecord).where(*filters.clauses())
        with self._guard("count transactions"):
            return self.session.scalar(stmt) or 0

    def find_by_id(self, transaction_id: str) -> TransactionRecord | None:
        """Return the transaction with ``transaction_id`` or None."""
        with self._guard("load transaction"):
            return self.session.get(TransactionRecord, transaction_id)

    def insert(self, record: TransactionRecord) -> TransactionRecord:
        """Persist a new transaction and return it refreshed from the database."""
        with self._guard("create transaction"):
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return record

    def save(self, record: TransactionRecord) -> TransactionRecord:
        """Commit pending changes to an already stored transaction."""
        with self._guard("update transaction"):
            self.session.commit()
            self.session.refresh(record)
        return record

    def delete_by_id(self, transaction_id: str) -> bool:
        """Delete the transaction with ``transaction_id``; return False when it does not exist."""
        with self._guard("delete transaction"):
            record = self.session.get(TransactionRecord, transaction_id)
            if record is None:
                return False
            self.session.delete(record)
            self.session.commit()
        return True

    def summarize_by_category(self) -> list[dict[str, Any]]:
        """Sum and count every transaction grouped by ``(type, category)``, largest total first."""
        total = func.sum(TransactionRecord.amount).label("total")
        stmt = (
            select(
                TransactionRecord.type,
                TransactionRecord.category,
                total,
                func.count(TransactionRecord.id).label("count"),
            )
            .group_by(TransactionRecord.type, TransactionRecord.category)
            .order_by(total.desc(), TransactionRecord.type, TransactionRecord.category)
        )
        with self._guard("summarize transactions by category"):
            rows = self.session.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def summarize_by_month(self) -> list[dict[str, Any]]:
        """Sum and count every transaction grouped by calendar month and type, most recent month first."""
        year = extract("year", TransactionRecord.date).label("year")
        month = extract("month", TransactionRecord.date).label("month")
        stmt = (
            select(
                year,
                month,
                TransactionRecord.type,
                func.sum(TransactionRecord.amount).label("total"),
                func.count(TransactionRecord.id).label("count"),
            )
            .group_by(year, month, TransactionRecord.type)
            .order_by(year.desc(), month.desc(), TransactionRecord.type)
        )
        with self._guard("summarize transactions by month"):
            rows = self.session.execute(stmt).mappings().all()
        return [{**row, "year": int(row["year"]), "month": int(row["month"])} for row in rows]
