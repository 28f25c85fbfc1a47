"""DB connection and ORM models for the Expense Tracker API."""

import uuid

from sqlalchemy import Column, DateTime, Float, Index, String, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.utils import get_logger

Base = declarative_base()

logger = get_logger("expense-tracker.db")


def new_transaction_id() -> str:
    """Generate an opaque unique identifier for a transaction."""
    return uuid.uuid4().hex


class TransactionRecord(Base):
    """A single income, expense or transfer entry."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_type_date", "type", "date"),
        Index("ix_transactions_division_date", "division", "date"),
        Index("ix_transactions_category_date", "category", "date"),
    )

    id = Column(String(32), primary_key=True, default=new_transaction_id)
    type = Column(String(16), nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String, nullable=False)
    division = Column(String(16), nullable=False)
    account = Column(String, nullable=False)
    to_account = Column(String, nullable=True)
    description = Column(String(500), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<TransactionRecord id={self.id} type={self.type} amount={self.amount}>"


class Database:
    """Owns the SQLAlchemy engine and session factory for the lifetime of the application."""

    def __init__(self, url: str, echo: bool = False) -> None:
        """Initialize the handle; no connection is made until :meth:`open`."""
        self.url = url
        self.echo = echo
        self.engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def is_open(self) -> bool:
        """Whether :meth:`open` has been called and :meth:`close` has not."""
        return self.engine is not None

    def open(self) -> None:
        """Create the engine, the session factory and any missing tables."""
        if self.is_open:
            return
        kwargs: dict = {"echo": self.echo}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # A single shared connection keeps the in-memory database alive across sessions.
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(self.url, **kwargs)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        Base.metadata.create_all(self.engine)
        logger.info(f"Database opened: {self.engine.url.render_as_string(hide_password=True)}")

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Database closed")

    def session(self) -> Session:
        """Create a new session bound to the open engine."""
        if self._session_factory is None:
            msg = "Database is not open"
            raise RuntimeError(msg)
        return self._session_factory()

    def ping(self) -> bool:
        """Return True if a trivial query succeeds."""
        if self.engine is None:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True
