"""
Back-office POS checkout.

Staff sell from the catalog without stock gating (overselling is allowed
here and shows up as negative stock; the storefront is the side that gates).
Checkout writes one sale row per cart line, not per unit, all sharing one
orderId.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import PartialFailureError, StoreError
from ..extensions import db
from ..validation import ValidationError, one_of, optional_text, to_datetime, to_positive_int
from threadlog.time_utils import utcnow
from . import customer_service, transaction_store
from .catalog_service import CatalogProduct, find_product
from .order_service import FULFILLMENT_STATUSES, PAYMENT_MODES, PAYMENT_STATUSES

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    product: CatalogProduct
    size: Optional[str]
    quantity: int

    @property
    def key(self) -> str:
        return f"{self.product.name}-{self.size}" if self.size else self.product.name

    @property
    def unit_price(self) -> Decimal:
        return self.product.price or Decimal("0")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    def __init__(self):
        self.lines: list[CartLine] = []

    def __len__(self) -> int:
        return len(self.lines)

    def _find(self, key: str) -> CartLine | None:
        for line in self.lines:
            if line.key == key:
                return line
        return None

    def add(self, product: CatalogProduct, size: Optional[str] = None, quantity: int = 1) -> CartLine:
        if quantity <= 0:
            raise ValidationError("quantity must be greater than zero")
        size = size.strip().upper() if size else None
        candidate = CartLine(product=product, size=size, quantity=quantity)
        existing = self._find(candidate.key)
        if existing is not None:
            existing.quantity += quantity
            return existing
        self.lines.append(candidate)
        return candidate

    def set_quantity(self, key: str, quantity: int) -> None:
        line = self._find(key)
        if line is None:
            return
        if quantity <= 0:
            self.remove(key)
        else:
            line.quantity = quantity

    def remove(self, key: str) -> None:
        self.lines = [line for line in self.lines if line.key != key]

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @classmethod
    def from_payload(cls, items, catalog: list[CatalogProduct]) -> "Cart":
        """Build a cart from [{"product": name, "size": "M", "quantity": 2}, ...]."""
        if not isinstance(items, list):
            raise ValidationError("items must be a list")
        cart = cls()
        for item in items:
            if not isinstance(item, dict):
                raise ValidationError("each item must be an object")
            name = (item.get("product") or "").strip()
            product = find_product(catalog, name)
            if product is None:
                raise ValidationError(f"Unknown product: {name or '(blank)'}")
            if product.price is None:
                raise ValidationError(f"Product has no price: {name}")
            cart.add(product, item.get("size"), to_positive_int(item.get("quantity", 1), "quantity"))
        return cart


def legacy_status_for(fulfillment: str, payment: str) -> str:
    """Single-field status kept on new rows so old readers still see something sensible."""
    if payment == "paid" and fulfillment == "pending":
        return "paid"
    return fulfillment


def line_details(line: CartLine, *, order_id: str, customer_name: str) -> dict:
    product = line.product
    details = {
        "orderId": order_id,
        "customerName": customer_name,
        "quantity": line.quantity,
        "unitPrice": float(line.unit_price),
        "itemName": product.name,
        "imageUrl": product.image_url,
    }
    if line.size:
        details["size"] = line.size
    if product.linked_color:
        # sale of a printed shirt consumes the linked blank
        details["color"] = product.linked_color
        if line.size:
            details["category"] = "blanks"
    return details


def insert_lines(rows: list[dict], action: str) -> list:
    """
    Insert rows one at a time. The first failure stops the rest; rows already
    written stay written and are reported through PartialFailureError.
    """
    created = []
    for index, row in enumerate(rows):
        try:
            created.append(transaction_store.insert(row))
        except StoreError as exc:
            if not created:
                raise
            failed = [{"id": row["id"], "error": str(exc)}]
            failed += [{"id": r["id"], "error": "not attempted"} for r in rows[index + 1:]]
            logger.warning("%s stopped after %d of %d rows: %s", action, len(created), len(rows), exc)
            raise PartialFailureError(
                f"{action} partially failed",
                succeeded=[tx.id for tx in created],
                failed=failed,
            )
    return created


def record_customer(name: str, contact_number: str | None, address: str | None, spent: Decimal) -> None:
    try:
        customer_service.upsert_customer(name, contact_number, address, spent)
    except (SQLAlchemyError, ValidationError):
        db.session.rollback()
        logger.exception("Failed to save customer %r", name)


def checkout(
    cart: Cart,
    customer_name: str,
    *,
    payment_mode: str = "Cash",
    payment_status: str = "paid",
    fulfillment_status: str = "pending",
    contact_number: str | None = None,
    date=None,
) -> list:
    """Record a POS sale; returns the created sale rows."""
    if not cart.lines:
        raise ValidationError("Cart is empty")
    customer_name = (customer_name or "").strip()
    if not customer_name:
        raise ValidationError("Please enter customer name")
    one_of(payment_mode, PAYMENT_MODES, "paymentMode")
    one_of(payment_status, PAYMENT_STATUSES, "paymentStatus")
    one_of(fulfillment_status, FULFILLMENT_STATUSES, "fulfillmentStatus")
    sale_date = to_datetime(date) if date else utcnow()

    order_id = str(uuid.uuid4())
    rows = []
    for line in cart.lines:
        details = line_details(line, order_id=order_id, customer_name=customer_name)
        details.update({
            "fulfillmentStatus": fulfillment_status,
            "paymentStatus": payment_status,
            "status": legacy_status_for(fulfillment_status, payment_status),
            "paymentMode": payment_mode,
        })
        if contact_number:
            details["contactNumber"] = contact_number
        size_label = f" ({line.size})" if line.size else ""
        rows.append({
            "id": str(uuid.uuid4()),
            "type": "sale",
            "amount": line.line_total,
            "description": f"Sold {line.quantity}x {line.product.name}{size_label} to {customer_name}",
            "category": "sale",
            "date": sale_date,
            "details": details,
        })

    created = insert_lines(rows, "Checkout")
    record_customer(customer_name, contact_number, None, cart.total)
    return created


def checkout_from_payload(payload: dict, catalog: list[CatalogProduct]) -> list:
    cart = Cart.from_payload(payload.get("items") or [], catalog)
    return checkout(
        cart,
        optional_text(payload, "customerName") or "",
        payment_mode=payload.get("paymentMode") or "Cash",
        payment_status=payload.get("paymentStatus") or "paid",
        fulfillment_status=payload.get("fulfillmentStatus") or "pending",
        contact_number=optional_text(payload, "contactNumber"),
        date=payload.get("date"),
    )
