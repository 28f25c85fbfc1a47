"""Transaction use cases: create, fetch, list, time-boxed edit, delete, and summaries.

The service owns the rules that span more than one field or need the clock: id and timestamp
assignment, the edit window, and the transfer check on edits. Persistence is delegated to an
injected :class:`TransactionStore` and the current time to an injected clock.
"""

from collections.abc import Callable, Mapping
from datetime import date, datetime, time
from typing import Any

from app.core.db import TransactionRecord, new_transaction_id
from app.core.errors import FieldError, ForbiddenError, NotFoundError, ValidationError
from app.core.models import CategorySummary, MonthlySummary, TransactionType
from app.core.settings import Settings
from app.core.utils import get_logger, to_naive_utc, utcnow
from app.services.edit_window import is_editable, locked_message
from app.services.transaction_store import TransactionFilter, TransactionStore
from app.services.validation import (
    EDITABLE_FIELDS,
    drop_stray_destination,
    merge_update,
    normalize_fields,
    validate_transaction,
    validate_transfer_accounts,
)

logger = get_logger("expense-tracker.service")

Clock = Callable[[], datetime]

NOT_FOUND_MESSAGE = "Transaction not found"


def parse_date_bound(value: str | None, field: str, end_of_day: bool = False) -> datetime | None:
    """Parse a list filter bound given as an ISO date or timestamp.

    A bare date covers the whole day: as an upper bound it means the last instant of that day.
    """
    if value is None or not value.strip():
        return None
    raw = value.strip()
    try:
        if len(raw) == len("YYYY-MM-DD"):
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end_of_day else time.min)
        return to_naive_utc(datetime.fromisoformat(raw))
    except (ValueError, OverflowError) as exc:
        raise ValidationError([FieldError(field, f"{raw} is not a valid date")]) from exc


class TransactionService:
    """Application service for transactions."""

    def __init__(self, store: TransactionStore, settings: Settings, clock: Clock = utcnow) -> None:
        """Initialize the service with its store, settings and clock."""
        self.store = store
        self.settings = settings
        self.clock = clock

    def _validate(self, candidate: Mapping[str, Any], now: datetime) -> None:
        errors = validate_transaction(candidate, now, self.settings.max_description_length)
        if errors:
            logger.warning(f"Rejected transaction: {errors[0].field}: {errors[0].message}")
            raise ValidationError(errors)

    def create(self, payload: Mapping[str, Any]) -> TransactionRecord:
        """Validate ``payload`` and store it as a new transaction."""
        now = self.clock()
        fields = drop_stray_destination(normalize_fields(payload))
        self._validate(fields, now)
        fields["amount"] = float(fields["amount"])
        record = TransactionRecord(id=new_transaction_id(), created_at=now, updated_at=now, **fields)
        record = self.store.insert(record)
        logger.info(f"Created {record.type} transaction {record.id}: {record.amount} ({record.category})")
        return record

    def get(self, transaction_id: str) -> TransactionRecord:
        """Return the transaction with ``transaction_id``."""
        record = self.store.find_by_id(transaction_id)
        if record is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return record

    def list_transactions(
        self,
        division: str | None = None,
        category: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> tuple[list[TransactionRecord], int]:
        """Return one page of matching transactions, newest first, with the total match count.

        The date range applies only when both bounds are given and includes both endpoints.
        """
        if limit is None:
            limit = self.settings.default_page_limit
        if page < 1:
            raise ValidationError([FieldError("page", "Page must be at least 1")])
        if limit < 1:
            raise ValidationError([FieldError("limit", "Limit must be at least 1")])
        start = parse_date_bound(start_date, "startDate")
        end = parse_date_bound(end_date, "endDate", end_of_day=True)
        filters = TransactionFilter(
            division=division.strip() if division else None,
            category=category.strip() if category else None,
            start=start if end is not None else None,
            end=end if start is not None else None,
        )
        records = self.store.find(filters, skip=(page - 1) * limit, limit=limit)
        total = self.store.count(filters)
        return records, total

    def update(self, transaction_id: str, changes: Mapping[str, Any]) -> TransactionRecord:
        """Overwrite fields of a transaction that is still inside its edit window."""
        record = self.get(transaction_id)
        now = self.clock()
        window = self.settings.edit_window_hours
        if not is_editable(record.created_at, now, window):
            logger.warning(f"Edit of transaction {transaction_id} refused: created at {record.created_at}")
            raise ForbiddenError(locked_message(window))

        incoming = normalize_fields(changes)
        if incoming.get("type") == TransactionType.transfer.value:
            # Checked against the payload alone; the merged record is validated below as well.
            errors = validate_transfer_accounts(incoming.get("account"), incoming.get("to_account"))
            if errors:
                logger.warning(f"Rejected edit of transaction {transaction_id}: {errors[0].message}")
                raise ValidationError(errors)

        current = {key: getattr(record, key) for key in EDITABLE_FIELDS}
        merged = drop_stray_destination(merge_update(current, incoming))
        self._validate(merged, now)
        merged["amount"] = float(merged["amount"])

        for key, value in merged.items():
            setattr(record, key, value)
        if self.settings.touch_updated_at_on_edit:
            record.updated_at = now
        record = self.store.save(record)
        logger.info(f"Updated transaction {record.id}: {sorted(incoming)}")
        return record

    def delete(self, transaction_id: str) -> None:
        """Permanently remove a transaction."""
        if not self.store.delete_by_id(transaction_id):
            raise NotFoundError(NOT_FOUND_MESSAGE)
        logger.info(f"Deleted transaction {transaction_id}")

    def summary_by_category(self) -> list[CategorySummary]:
        """Totals and counts per ``(type, category)``, largest total first."""
        return [CategorySummary(**row) for row in self.store.summarize_by_category()]

    def summary_by_month(self) -> list[MonthlySummary]:
        """Totals and counts per calendar month and type, most recent month first."""
        return [MonthlySummary(**row) for row in self.store.summarize_by_month()]
