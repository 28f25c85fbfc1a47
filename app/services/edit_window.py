"""Edit window policy: a transaction may be edited only for a limited time after creation."""

from datetime import datetime, timedelta

DEFAULT_EDIT_WINDOW_HOURS = 12.0


def edit_deadline(created_at: datetime, window_hours: float = DEFAULT_EDIT_WINDOW_HOURS) -> datetime:
    """Return the last instant at which a transaction created at ``created_at`` is still editable."""
    return created_at + timedelta(hours=window_hours)


def is_editable(created_at: datetime, now: datetime, window_hours: float = DEFAULT_EDIT_WINDOW_HOURS) -> bool:
    """Return True while ``now - created_at`` is within the window, boundary included."""
    return now <= edit_deadline(created_at, window_hours)


def locked_message(window_hours: float = DEFAULT_EDIT_WINDOW_HOURS) -> str:
    """Message reported when an edit is attempted after the window closed."""
    hours = int(window_hours) if float(window_hours).is_integer() else window_hours
    return f"Editing is restricted after {hours} hours"
