# Overview: Service-layer gateway over the transactions table; the only code that writes transaction rows.

from __future__ import annotations

import uuid

from sqlalchemy.exc import IntegrityError, OperationalError

from ..extensions import db
from ..errors import ConstraintViolation, NotFoundError, StoreConnectionError
from ..models import Transaction, TRANSACTION_TYPES
from ..validation import ValidationError, to_amount, to_datetime
from threadlog.time_utils import utcnow
"""
Transaction Store Invariants (authoritative)

- Every business fact is a Transaction row; projections are folded from list_all().
- ids are assigned once (uuid4 text when the caller gives none) and never change.
- Each write commits on its own. There is no atomicity across calls: a
  workflow issuing N writes can leave N-k of them committed.
- delete_by_id is idempotent: an absent id is a no-op returning False.
- Only type/amount/description/category/date/details are writable after insert.
"""

WRITABLE_FIELDS = ("type", "amount", "description", "category", "date", "details")


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConstraintViolation(f"{action} rejected by a database constraint", details={"reason": str(exc.orig)})
    except OperationalError as exc:
        db.session.rollback()
        raise StoreConnectionError(f"{action} failed: store unavailable", details={"reason": str(exc.orig)})


def _coerce_field(key: str, value):
    if key == "type":
        if value not in TRANSACTION_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(TRANSACTION_TYPES)}")
        return value
    if key == "amount":
        return to_amount(0 if value is None else value, "amount", allow_negative=True)
    if key == "description":
        return "" if value is None else str(value)
    if key == "category":
        return str(value).strip() if value else "general"
    if key == "date":
        return to_datetime(value, "date")
    if key == "details":
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValidationError("details must be an object")
        return dict(value)
    raise ValidationError(f"{key} is not writable")


def build_transaction(data: dict) -> Transaction:
    """Validate a payload and build an unsaved Transaction."""
    if not isinstance(data, dict):
        raise ValidationError("transaction must be an object")

    tx = Transaction(
        id=str(data.get("id") or uuid.uuid4()),
        type=_coerce_field("type", data.get("type")),
        amount=_coerce_field("amount", data.get("amount")),
        description=_coerce_field("description", data.get("description")),
        category=_coerce_field("category", data.get("category")),
        date=_coerce_field("date", data["date"]) if data.get("date") else utcnow(),
        details=_coerce_field("details", data.get("details")),
    )
    return tx


def get(transaction_id: str) -> Transaction | None:
    try:
        return db.session.get(Transaction, transaction_id)
    except OperationalError as exc:
        db.session.rollback()
        raise StoreConnectionError("Failed to load transaction", details={"reason": str(exc.orig)})


def insert(data: dict) -> Transaction:
    """Insert one transaction and return the stored row."""
    tx = build_transaction(data)
    if get(tx.id) is not None:
        raise ConstraintViolation("Transaction id already exists", details={"id": tx.id})
    db.session.add(tx)
    _commit("Insert")
    return tx


def bulk_insert(rows: list[dict]) -> list[Transaction]:
    """Insert many transactions in one commit (all-or-nothing)."""
    built = [build_transaction(row) for row in rows]
    seen: set[str] = set()
    for tx in built:
        if tx.id in seen or get(tx.id) is not None:
            raise ConstraintViolation("Transaction id already exists", details={"id": tx.id})
        seen.add(tx.id)
    db.session.add_all(built)
    _commit("Bulk insert")
    return built


def update_fields(transaction_id: str, fields: dict) -> Transaction:
    """Rewrite selected fields of an existing row in place."""
    tx = get(transaction_id)
    if tx is None:
        raise NotFoundError("Transaction not found", details={"id": transaction_id})

    for key, value in fields.items():
        if key not in WRITABLE_FIELDS:
            raise ValidationError(f"{key} is not writable")
        setattr(tx, key, _coerce_field(key, value))

    _commit("Update")
    return tx


def delete_by_id(transaction_id: str) -> bool:
    """Hard delete. Returns False when the id was already gone."""
    tx = get(transaction_id)
    if tx is None:
        return False
    db.session.delete(tx)
    _commit("Delete")
    return True


def delete_all() -> int:
    try:
        count = db.session.query(Transaction).delete()
    except OperationalError as exc:
        db.session.rollback()
        raise StoreConnectionError("Delete all failed: store unavailable", details={"reason": str(exc.orig)})
    _commit("Delete all")
    return count


def list_all() -> list[Transaction]:
    """Full log, newest first."""
    try:
        return (
            db.session.query(Transaction)
            .order_by(Transaction.date.desc(), Transaction.created_at.desc())
            .all()
        )
    except OperationalError as exc:
        db.session.rollback()
        raise StoreConnectionError("Failed to load transactions", details={"reason": str(exc.orig)})
