"""Pure normalization and validation rules for transactions.

Functions here take the full candidate record as a plain mapping keyed by ORM attribute name
(``to_account``, not ``toAccount``) and never touch the database or the clock. Field names in
reported errors use the public camelCase form.
"""

import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic.alias_generators import to_camel

from app.core.errors import FieldError
from app.core.models import Division, TransactionType
from app.core.utils import to_naive_utc

MAX_DESCRIPTION_LENGTH = 500
MAX_AMOUNT = 1_000_000_000_000

# Fields a client may set on create or overwrite on edit. id, created_at and updated_at are never client-owned.
EDITABLE_FIELDS = ("type", "amount", "category", "division", "account", "to_account", "description", "date")

STRING_FIELDS = ("type", "category", "division", "account", "to_account", "description")

TRANSACTION_TYPES = {t.value for t in TransactionType}
DIVISIONS = {d.value for d in Division}


def _trim(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _in_utc_range(value: datetime) -> bool:
    try:
        to_naive_utc(value)
    except OverflowError:
        return False
    return True


def normalize_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Keep editable fields only, trim strings, and convert dates to naive UTC.

    Blank strings become ``None`` so that required-field checks treat them as missing.
    """
    fields = {}
    for key in EDITABLE_FIELDS:
        if key not in raw:
            continue
        value = raw[key]
        if key in STRING_FIELDS:
            value = _trim(value)
        elif key == "date" and isinstance(value, datetime) and _in_utc_range(value):
            value = to_naive_utc(value)
        fields[key] = value
    return fields


def merge_update(current: Mapping[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay whitelisted, normalized ``changes`` on ``current`` and return the resulting record.

    Keys outside :data:`EDITABLE_FIELDS` in ``changes`` are ignored.
    """
    merged = {key: current.get(key) for key in EDITABLE_FIELDS}
    merged.update(normalize_fields(changes))
    return merged


def drop_stray_destination(candidate: dict[str, Any]) -> dict[str, Any]:
    """Clear ``to_account`` on anything but a transfer, keeping the destination-iff-transfer invariant."""
    if candidate.get("type") != TransactionType.transfer.value:
        candidate["to_account"] = None
    return candidate


def _validate_amount(amount: Any) -> str | None:
    if amount is None:
        return "Amount is required"
    if isinstance(amount, bool):
        return "Amount must be a number"
    try:
        number = float(amount)
    except (TypeError, ValueError):
        return "Amount must be a number"
    if math.isnan(number) or math.isinf(number):
        return "Amount must be a number"
    if number <= 0:
        return "Amount must be greater than 0"
    if number > MAX_AMOUNT:
        return f"Amount cannot exceed {MAX_AMOUNT:,}"
    return None


def validate_transfer_accounts(account: Any, to_account: Any) -> list[FieldError]:
    """Check that a transfer names a destination distinct from its source."""
    if not _present(to_account):
        return [FieldError("toAccount", "Destination account is required for transfers")]
    if account == to_account:
        return [FieldError("toAccount", "Source and destination accounts must be different")]
    return []


def validate_transaction(
    candidate: Mapping[str, Any],
    now: datetime,
    max_description_length: int = MAX_DESCRIPTION_LENGTH,
) -> list[FieldError]:
    """Return every field-level error in ``candidate``; an empty list means the record is valid.

    ``candidate`` is expected to be normalized already (see :func:`normalize_fields`). ``now`` is
    naive UTC and bounds ``date``.
    """
    errors: list[FieldError] = []

    tx_type = candidate.get("type")
    if not _present(tx_type):
        errors.append(FieldError("type", "Transaction type is required"))
    elif tx_type not in TRANSACTION_TYPES:
        errors.append(FieldError("type", f"{tx_type} is not a valid transaction type"))

    amount_error = _validate_amount(candidate.get("amount"))
    if amount_error:
        errors.append(FieldError("amount", amount_error))

    for key in ("category", "division", "account", "description"):
        if not _present(candidate.get(key)):
            errors.append(FieldError(to_camel(key), f"{key.capitalize()} is required"))

    division = candidate.get("division")
    if _present(division) and division not in DIVISIONS:
        errors.append(FieldError("division", f"{division} is not a valid division"))

    description = candidate.get("description")
    if isinstance(description, str) and len(description) > max_description_length:
        errors.append(
            FieldError("description", f"Description cannot exceed {max_description_length} characters")
        )

    date = candidate.get("date")
    if date is None:
        errors.append(FieldError("date", "Date is required"))
    elif not isinstance(date, datetime) or not _in_utc_range(date):
        errors.append(FieldError("date", "Date must be a valid timestamp"))
    elif to_naive_utc(date) > now:
        errors.append(FieldError("date", "Date cannot be in the future"))

    if tx_type == TransactionType.transfer.value:
        errors.extend(validate_transfer_accounts(candidate.get("account"), candidate.get("to_account")))

    return errors
