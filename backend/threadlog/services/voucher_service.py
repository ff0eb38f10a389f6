# Overview: Service-layer operations for vouchers; discount codes stored as voucher transactions.

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..details import sale_line, voucher_definition
from ..errors import NotFoundError, PartialFailureError, StoreError
from ..validation import (
    ConflictError,
    ValidationError,
    one_of,
    optional_text,
    require_text,
    to_amount,
    to_positive_int,
)
from threadlog.time_utils import parse_iso_date
from . import transaction_store
from .replay import newest_first

logger = logging.getLogger(__name__)

DISCOUNT_TYPES = ("percent", "fixed")
TOGGLE_MODES = ("in_place", "recreate")
CENTS = Decimal("0.01")


class VoucherError(ValidationError):
    """Voucher exists but cannot be redeemed (inactive, expired, used up)."""


@dataclass(frozen=True)
class Voucher:
    id: str
    code: str
    discount_type: Optional[str]
    value: Optional[Decimal]
    active: bool
    description: str
    expiry_date: Optional[str] = None
    usage_limit: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "discountType": self.discount_type,
            "value": float(self.value) if self.value is not None else None,
            "active": self.active,
            "description": self.description,
            "expiryDate": self.expiry_date,
            "usageLimit": self.usage_limit,
        }


def _to_voucher(tx) -> Voucher | None:
    definition = voucher_definition(tx.details or {})
    if not definition.code:
        return None
    return Voucher(
        id=tx.id,
        code=definition.code,
        discount_type=definition.discount_type,
        value=definition.value,
        active=definition.active,
        description=tx.description or "",
        expiry_date=definition.expiry_date,
        usage_limit=definition.usage_limit,
    )


def list_vouchers(transactions, search: str = "") -> list[Voucher]:
    needle = (search or "").strip().lower()
    vouchers = []
    for tx in newest_first(transactions):
        if tx.type != "voucher":
            continue
        voucher = _to_voucher(tx)
        if voucher is None:
            continue
        if needle and needle not in voucher.code.lower():
            continue
        vouchers.append(voucher)
    return vouchers


def find_voucher_by_code(transactions, code: str) -> Voucher | None:
    wanted = (code or "").strip().upper()
    if not wanted:
        return None
    for voucher in list_vouchers(transactions):
        if voucher.code.upper() == wanted:
            return voucher
    return None


def _describe(code: str, discount_type: str, value: Decimal) -> str:
    if discount_type == "percent":
        return f"Voucher {code}: {value.normalize():f}% off"
    return f"Voucher {code}: PHP {value:.2f} off"


def create_voucher(payload: dict, transactions):
    code = require_text(payload, "code").upper()
    discount_type = one_of(payload.get("discountType"), DISCOUNT_TYPES, "discountType")
    value = to_amount(payload.get("value"), "value")
    if value <= 0:
        raise ValidationError("value must be greater than zero")
    if discount_type == "percent" and value > 100:
        raise ValidationError("percent value cannot exceed 100")

    if find_voucher_by_code(transactions, code) is not None:
        raise ConflictError(f"Voucher code {code} already exists")

    details = {
        "code": code,
        "discountType": discount_type,
        "value": float(value),
        "active": payload.get("active") is not False,
    }
    expiry = optional_text(payload, "expiryDate")
    if expiry:
        try:
            details["expiryDate"] = parse_iso_date(expiry).isoformat()
        except ValueError:
            raise ValidationError("expiryDate must be an ISO date")
    if payload.get("usageLimit") is not None:
        details["usageLimit"] = to_positive_int(payload.get("usageLimit"), "usageLimit")

    return transaction_store.insert({
        "type": "voucher",
        "amount": 0,
        "description": optional_text(payload, "description") or _describe(code, discount_type, value),
        "category": "system",
        "details": details,
    })


def _load_voucher_row(voucher_id: str):
    tx = transaction_store.get(voucher_id)
    if tx is None or tx.type != "voucher":
        raise NotFoundError("Voucher not found", details={"id": voucher_id})
    return tx


def toggle_voucher(voucher_id: str, mode: str = "in_place"):
    """
    Flip a voucher's active flag.

    in_place rewrites details on the same row. recreate deletes the row and
    inserts a copy with the flipped flag, so the voucher gets a new id and
    date; older clients toggled vouchers this way.
    """
    one_of(mode, TOGGLE_MODES, "mode")
    tx = _load_voucher_row(voucher_id)
    details = dict(tx.details or {})
    details["active"] = details.get("active") is False

    if mode == "in_place":
        return transaction_store.update_fields(tx.id, {"details": details})

    copy = {
        "type": tx.type,
        "amount": tx.amount,
        "description": tx.description,
        "category": tx.category,
        "details": details,
    }
    transaction_store.delete_by_id(tx.id)
    try:
        return transaction_store.insert(copy)
    except StoreError as exc:
        logger.error("Voucher %s deleted but its toggled copy was not stored: %s", tx.id, exc)
        lost = dict(copy, amount=float(tx.amount or 0))
        raise PartialFailureError(
            "Voucher toggle partially failed",
            succeeded=[tx.id],
            failed=[{"id": tx.id, "error": str(exc), "voucher": lost}],
        )


def delete_voucher(voucher_id: str) -> bool:
    tx = transaction_store.get(voucher_id)
    if tx is not None and tx.type != "voucher":
        raise NotFoundError("Voucher not found", details={"id": voucher_id})
    return transaction_store.delete_by_id(voucher_id)


def count_redemptions(transactions, code: str) -> int:
    """Distinct orders that used the code."""
    wanted = code.upper()
    orders = set()
    for tx in transactions:
        if tx.type != "sale":
            continue
        line = sale_line(tx.details or {})
        if line.voucher_code and line.voucher_code.upper() == wanted:
            orders.add(line.order_id)
    return len(orders)


def compute_discount(voucher: Voucher, subtotal: Decimal) -> Decimal:
    subtotal = Decimal(subtotal)
    value = voucher.value or Decimal("0")
    if voucher.discount_type == "percent":
        discount = subtotal * value / Decimal(100)
    else:
        discount = min(value, subtotal)
    return discount.quantize(CENTS, rounding=ROUND_HALF_UP)


def redeem_voucher(code: str, subtotal: Decimal, transactions, today: date) -> tuple[Voucher, Decimal]:
    """Resolve a code against the log and return (voucher, discount)."""
    voucher = find_voucher_by_code(transactions, code)
    if voucher is None or not voucher.active:
        raise VoucherError("Invalid or inactive voucher")

    if voucher.expiry_date:
        try:
            expiry = parse_iso_date(voucher.expiry_date)
        except ValueError:
            expiry = None
        # valid through the end of the expiry day
        if expiry is not None and today > expiry:
            raise VoucherError("Voucher has expired")

    if voucher.usage_limit and count_redemptions(transactions, voucher.code) >= voucher.usage_limit:
        raise VoucherError("Voucher usage limit reached")

    return voucher, compute_discount(voucher, subtotal)
