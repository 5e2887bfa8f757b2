"""Content fingerprints used to detect already imported statement rows."""

import hashlib
from datetime import datetime
from decimal import Decimal

HASH_LENGTH = 16

_CENTS = Decimal("0.01")


def _digest(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def content_hash(date: datetime, description: str, amount: Decimal, currency: str) -> str:
    """Fingerprint of a PDF or CSV statement row.

    Only identifying fields take part, so re-parsing the same statement
    yields the same hash regardless of row position.
    """
    key = f"{date:%Y-%m-%d %H:%M}-{description}-{amount.quantize(_CENTS)}-{currency}"
    return _digest(key)


def qif_hash(account_name: str, date: datetime, signed_amount: Decimal, description: str) -> str:
    """Fingerprint of a QIF record, scoped by the account it was read under."""
    key = f"{account_name}|{date:%Y-%m-%d}|{signed_amount.quantize(_CENTS)}|{description}"
    return f"qif-{_digest(key)}"
