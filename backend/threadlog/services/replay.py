"""
Replay ordering shared by every fold.

The store hands out the log newest-first. Folds that are last-write-wins
(catalog) must see it oldest-first, so they always go through
chronological() rather than trusting the caller's order.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence


def _date_key(tx) -> datetime:
    return getattr(tx, "date", None) or datetime.min


def chronological(transactions: Iterable) -> list:
    """
    Oldest-first replay order.

    Reverse first, then stable-sort by date: for store order (newest first)
    this is a plain reversal, including for rows sharing a timestamp.
    """
    rows: Sequence = list(transactions)
    return sorted(reversed(rows), key=_date_key)


def newest_first(transactions: Iterable) -> list:
    """Storage/display order; ties keep their input order."""
    return sorted(transactions, key=_date_key, reverse=True)
