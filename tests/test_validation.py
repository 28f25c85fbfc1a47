"""Unit tests for the pure normalization, validation and edit window rules."""

from datetime import datetime, timedelta, timezone

from app.services.edit_window import edit_deadline, is_editable, locked_message
from app.services.validation import MAX_AMOUNT, merge_update, normalize_fields, validate_transaction
from tests.conftest import NOW


def _fields_of(errors: list) -> list[str]:
    return [error.field for error in errors]


def test_valid_record_has_no_errors(make_fields) -> None:
    errors = validate_transaction(make_fields(), NOW)
    if errors:
        msg = f"Expected no errors, got {errors}"
        raise AssertionError(msg)


def test_every_problem_is_reported(make_fields) -> None:
    """All field errors are collected, not just the first one."""
    candidate = make_fields(type=None, amount=None, category=None, division="Home", description=None, date=None)
    fields = _fields_of(validate_transaction(candidate, NOW))
    expected = ["type", "amount", "category", "description", "division", "date"]
    if fields != expected:
        msg = f"Expected errors on {expected}, got {fields}"
        raise AssertionError(msg)


def test_amount_must_be_positive_and_numeric(make_fields) -> None:
    for amount in (0, -0.01, "abc", float("nan"), float("inf"), True):
        errors = validate_transaction(make_fields(amount=amount), NOW)
        if _fields_of(errors) != ["amount"]:
            msg = f"Expected an amount error for {amount!r}, got {errors}"
            raise AssertionError(msg)
    if validate_transaction(make_fields(amount=0.01), NOW):
        msg = "Expected 0.01 to be a valid amount"
        raise AssertionError(msg)


def test_amount_has_an_upper_bound(make_fields) -> None:
    """Amounts past the cap are refused so that summary totals stay finite."""
    errors = validate_transaction(make_fields(amount=1e308), NOW)
    if [e.message for e in errors] != ["Amount cannot exceed 1,000,000,000,000"]:
        msg = f"Expected an amount cap error, got {errors}"
        raise AssertionError(msg)
    if validate_transaction(make_fields(amount=MAX_AMOUNT), NOW):
        msg = "Expected the cap itself to be a valid amount"
        raise AssertionError(msg)


def test_date_may_equal_now_but_not_exceed_it(make_fields) -> None:
    if validate_transaction(make_fields(date=NOW), NOW):
        msg = "Expected a date equal to now to be valid"
        raise AssertionError(msg)
    errors = validate_transaction(make_fields(date=NOW + timedelta(seconds=1)), NOW)
    if [e.message for e in errors] != ["Date cannot be in the future"]:
        msg = f"Expected a future date error, got {errors}"
        raise AssertionError(msg)


def test_aware_dates_are_compared_in_utc(make_fields) -> None:
    """An aware timestamp in a +02:00 zone is converted to naive UTC."""
    local = datetime(2025, 6, 30, 15, 0, tzinfo=timezone(timedelta(hours=2)))
    normalized = normalize_fields({"date": local})
    if normalized["date"] != NOW + timedelta(hours=1):
        msg = f"Expected the date to be converted to naive UTC, got {normalized['date']}"
        raise AssertionError(msg)


def test_aware_date_outside_utc_range_is_invalid(make_fields) -> None:
    """0001-01-01T00:00+01:00 falls before the first representable UTC instant."""
    too_early = datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=1)))
    normalized = normalize_fields({"date": too_early})
    if normalized["date"] is not too_early:
        msg = f"Expected the date to be left for validation, got {normalized['date']}"
        raise AssertionError(msg)
    errors = validate_transaction(make_fields(date=too_early), NOW)
    if [(e.field, e.message) for e in errors] != [("date", "Date must be a valid timestamp")]:
        msg = f"Expected an invalid date error, got {errors}"
        raise AssertionError(msg)


def test_transfer_rules_only_apply_to_transfers(make_fields) -> None:
    cases = [
        (make_fields(type="transfer", to_account=None), ["Destination account is required for transfers"]),
        (make_fields(type="transfer", to_account="Cash"), ["Source and destination accounts must be different"]),
        (make_fields(type="transfer", to_account="Bank"), []),
        (make_fields(type="expense", to_account="Cash"), []),
    ]
    for candidate, expected in cases:
        messages = [e.message for e in validate_transaction(candidate, NOW)]
        if messages != expected:
            msg = f"Expected {expected} for {candidate}, got {messages}"
            raise AssertionError(msg)


def test_description_limit_is_configurable(make_fields) -> None:
    errors = validate_transaction(make_fields(description="x" * 20), NOW, max_description_length=10)
    if [e.message for e in errors] != ["Description cannot exceed 10 characters"]:
        msg = f"Expected a description length error, got {errors}"
        raise AssertionError(msg)


def test_normalize_trims_and_blanks_become_missing() -> None:
    normalized = normalize_fields({"category": "  Food ", "account": "   ", "description": "\tLunch\n", "amount": 5})
    expected = {"category": "Food", "account": None, "description": "Lunch", "amount": 5}
    if normalized != expected:
        msg = f"Expected {expected}, got {normalized}"
        raise AssertionError(msg)


def test_merge_update_ignores_protected_and_unknown_keys(make_fields) -> None:
    current = make_fields()
    merged = merge_update(
        current,
        {"id": "forged", "created_at": NOW, "updated_at": NOW, "owner": "me", "category": " Travel "},
    )
    if set(merged) != set(current):
        msg = f"Expected only editable fields in the merge, got {sorted(merged)}"
        raise AssertionError(msg)
    if merged["category"] != "Travel" or merged["account"] != current["account"]:
        msg = f"Expected only category to change, got {merged}"
        raise AssertionError(msg)


def test_edit_window_boundary() -> None:
    created = NOW
    if edit_deadline(created) != created + timedelta(hours=12):
        msg = "Expected a 12 hour deadline"
        raise AssertionError(msg)
    if not is_editable(created, created + timedelta(hours=11, minutes=59)):
        msg = "Expected an edit at 11h59 to be allowed"
        raise AssertionError(msg)
    if not is_editable(created, created + timedelta(hours=12)):
        msg = "Expected an edit at exactly 12h to be allowed"
        raise AssertionError(msg)
    if is_editable(created, created + timedelta(hours=12, minutes=1)):
        msg = "Expected an edit at 12h01 to be refused"
        raise AssertionError(msg)
    if not is_editable(created, created + timedelta(hours=23), window_hours=24):
        msg = "Expected a 24 hour window to allow an edit at 23h"
        raise AssertionError(msg)


def test_locked_message() -> None:
    if locked_message(12.0) != "Editing is restricted after 12 hours":
        msg = f"Unexpected message {locked_message(12.0)!r}"
        raise AssertionError(msg)
    if locked_message(1.5) != "Editing is restricted after 1.5 hours":
        msg = f"Unexpected message {locked_message(1.5)!r}"
        raise AssertionError(msg)
