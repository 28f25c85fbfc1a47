"""Pydantic models for the Expense Tracker API.

This module defines the request and response models exchanged over HTTP. Request models are
deliberately loose (every field optional, strings unconstrained) so that the domain rules in
``app.services.validation`` report every problem with a field-specific message. Response models
are built from ORM rows and serialize with camelCase keys.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from app.core.utils import as_utc


class TransactionType(str, Enum):
    """Kind of money movement a transaction records."""

    income = "income"
    expense = "expense"
    transfer = "transfer"


class Division(str, Enum):
    """Coarse ownership tag partitioning transactions."""

    office = "Office"
    personal = "Personal"


class CamelModel(BaseModel):
    """Base model exposing camelCase keys while accepting snake_case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionPayload(CamelModel):
    """Raw transaction fields as sent by a client on create or edit."""

    type: str | None = None
    amount: float | None = None
    category: str | None = None
    division: str | None = None
    account: str | None = None
    to_account: str | None = None
    description: str | None = None
    date: datetime | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def reject_boolean_amount(cls, value: object) -> object:
        """Refuse JSON booleans, which a lax float would silently turn into 0.0 or 1.0."""
        if isinstance(value, bool):
            msg = "Amount must be a number"
            raise ValueError(msg)
        return value


class TransactionOut(CamelModel):
    """A stored transaction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    type: TransactionType
    amount: float
    category: str
    division: Division
    account: str
    to_account: str | None = None
    description: str
    date: datetime
    created_at: datetime
    updated_at: datetime

    @field_serializer("date", "created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> datetime:
        """Render stored naive UTC timestamps as explicit UTC."""
        return as_utc(value)


class CategorySummary(BaseModel):
    """Sum and count of transactions sharing a type and category."""

    type: TransactionType
    category: str
    total: float
    count: int


class MonthlySummary(BaseModel):
    """Sum and count of transactions of one type within a calendar month."""

    year: int
    month: int
    type: TransactionType
    total: float
    count: int


class MessageResponse(BaseModel):
    """Plain confirmation or error message."""

    message: str


class HealthStatus(BaseModel):
    """Health check payload."""

    status: str
    database: str
    uptime: float
