from __future__ import annotations

from ..errors import NotFoundError
from ..validation import ValidationError, optional_text, require_text, to_amount, to_datetime
from threadlog.time_utils import to_utc_z, utcnow
from . import transaction_store
from .replay import newest_first

EXPENSE_CATEGORIES = (
    "Rent",
    "Utilities",
    "Marketing/Ads",
    "Packaging",
    "Software/Subscriptions",
    "Transportation",
)


def _expense_category(payload: dict) -> str:
    category = require_text(payload, "category")
    if category == "Other":
        return require_text(payload, "customCategory", "custom category")
    return category


def list_expenses(transactions) -> list:
    """All expense rows (stock purchases included), newest first."""
    return [tx for tx in newest_first(transactions) if tx.type == "expense"]


def record_expense(payload: dict, user_email: str | None = None):
    """Operating expense (rent, ads, ...); no stock movement."""
    category = _expense_category(payload)
    amount = to_amount(payload.get("amount"), "amount")
    details = {"subCategory": category}
    if user_email:
        details["createdBy"] = user_email

    return transaction_store.insert({
        "type": "expense",
        "amount": amount,
        "description": optional_text(payload, "description") or f"Expense: {category}",
        "category": "general",
        "date": to_datetime(payload["date"]) if payload.get("date") else None,
        "details": details,
    })


def update_expense(transaction_id: str, payload: dict, user_email: str | None = None):
    tx = transaction_store.get(transaction_id)
    if tx is None or tx.type != "expense":
        raise NotFoundError("Expense not found", details={"id": transaction_id})

    fields: dict = {}
    details = dict(tx.details or {})
    if "amount" in payload:
        fields["amount"] = to_amount(payload.get("amount"), "amount")
    if "category" in payload:
        details["subCategory"] = _expense_category(payload)
    if "description" in payload:
        fields["description"] = optional_text(payload, "description") or f"Expense: {details.get('subCategory', 'general')}"
    if "date" in payload:
        fields["date"] = to_datetime(payload.get("date"))
    if not fields and details == (tx.details or {}):
        raise ValidationError("No expense fields to update")

    details["updatedBy"] = user_email or "Unknown"
    details["updatedAt"] = to_utc_z(utcnow())
    fields["details"] = details
    return transaction_store.update_fields(transaction_id, fields)
