# Overview: Service-layer operations for reporting; dashboard totals folded from the log.

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ..validation import one_of

PERIODS = ("all", "daily", "monthly", "yearly")


def _in_period(tx_date: datetime | None, period: str, now: datetime) -> bool:
    if period == "all":
        return True
    if tx_date is None:
        return False
    if period == "daily":
        return tx_date.date() == now.date()
    if period == "monthly":
        return (tx_date.year, tx_date.month) == (now.year, now.month)
    return tx_date.year == now.year


def dashboard_summary(transactions, period: str, now: datetime) -> dict:
    one_of(period, PERIODS, "period")

    total_sales = Decimal("0")
    total_expenses = Decimal("0")
    count = 0
    for tx in transactions:
        if not _in_period(tx.date, period, now):
            continue
        count += 1
        amount = Decimal(str(tx.amount or 0))
        if tx.type == "sale":
            total_sales += amount
        elif tx.type == "expense":
            total_expenses += amount

    return {
        "period": period,
        "total_sales": float(total_sales),
        "total_expenses": float(total_expenses),
        "net_profit": float(total_sales - total_expenses),
        "transaction_count": count,
    }
