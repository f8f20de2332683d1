"""
Record helpers for wallets and receipts.

Records are plain dicts; payload fields are opaque. Timestamps come back
from storage as strings and are turned into datetimes here.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

Record = Dict[str, Any]

WALLET_DATE_FIELDS = ("createdAt", "updatedAt", "deletedAt")
RECEIPT_DATE_FIELDS = ("receivedAt",)
DATE_FIELDS = WALLET_DATE_FIELDS + RECEIPT_DATE_FIELDS

# Shorter digit strings are compact ISO dates such as 2024 or 20241019.
EPOCH_MILLIS_MIN_DIGITS = 10


def is_blank(value: Any) -> bool:
    """True for None and the empty string; 0 and False are values."""
    return value is None or value == ""


def _from_epoch_millis(value: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp into a datetime.

    Accepts datetimes, epoch milliseconds (numbers or digit strings of at
    least ten digits) and ISO-8601 strings, including a trailing ``Z``.
    Anything else yields None.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch_millis(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.isdigit() and len(text) >= EPOCH_MILLIS_MIN_DIGITS:
        return _from_epoch_millis(int(text))
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def deserialize_dates(
    record: Optional[Record], fields: Iterable[str] = DATE_FIELDS
) -> Optional[Record]:
    """Return a shallow copy of ``record`` with its date fields parsed."""
    if record is None:
        return None
    parsed = dict(record)
    for field in fields:
        if field in parsed:
            parsed[field] = parse_datetime(parsed[field])
    return parsed
