"""
Customer-facing shop.

Reads the same catalog and raw inventory projections as the back office,
but unlike the POS it refuses to sell past computed stock. Online orders
land as sale rows flagged isOnlineOrder, pending and unpaid.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP

from ..validation import ValidationError, one_of, optional_text, require_text
from threadlog.time_utils import utcnow
from .catalog_service import project_catalog
from .inventory_service import SIZES, project_raw_inventory, shirt_key, stock_for
from .order_service import PAYMENT_MODES
from .pos_service import Cart, insert_lines, line_details, record_customer
from .voucher_service import redeem_voucher

SHIPPING_FEES = {"MM": Decimal("100"), "Provincial": Decimal("200")}
PROOF_REQUIRED_MODES = ("Gcash", "Bank Transfer")
CENTS = Decimal("0.01")


def storefront_catalog(transactions) -> list[dict]:
    raw = project_raw_inventory(transactions)
    result = []
    for product in project_catalog(transactions):
        row = product.to_dict()
        row["stock"] = {size: stock_for(product, size, raw) for size in SIZES}
        result.append(row)
    return result


def _shipping(payload: dict) -> dict:
    region = payload.get("region") or "MM"
    one_of(region, tuple(SHIPPING_FEES), "region")
    shipping = {
        "address": require_text(payload, "address", "street address"),
        "city": require_text(payload, "city"),
        "barangay": require_text(payload, "barangay"),
        "contactNumber": require_text(payload, "contactNumber", "contact number"),
        "region": region,
        "shippingFee": float(SHIPPING_FEES[region]),
    }
    if region == "Provincial":
        shipping["province"] = require_text(payload, "province")
    else:
        shipping["province"] = optional_text(payload, "province") or "Metro Manila"
    return shipping


def allocate_discount(discount: Decimal, amounts: list[Decimal]) -> list[Decimal]:
    """
    Split `discount` across `amounts` in whole cents, proportionally.

    Shares are floored to the cent and the leftover cents go to the lines
    with the largest remainders (later lines win ties). Every share stays
    within 0..amount and the shares sum to the discount.
    """
    subtotal = sum(amounts, Decimal("0"))
    discount = min(discount, subtotal).quantize(CENTS, rounding=ROUND_HALF_UP)
    if discount <= 0 or subtotal <= 0:
        return [Decimal("0.00") for _ in amounts]

    exact = [discount * amount / subtotal for amount in amounts]
    shares = [value.quantize(CENTS, rounding=ROUND_DOWN) for value in exact]
    leftover = int((discount - sum(shares, Decimal("0"))) / CENTS)
    by_remainder = sorted(range(len(amounts)), key=lambda i: (exact[i] - shares[i], i), reverse=True)
    for index in by_remainder[:leftover]:
        shares[index] += CENTS
    return shares


def _check_stock(cart: Cart, raw: dict[str, int]) -> None:
    wanted: dict[str, int] = {}
    labels: dict[str, str] = {}
    for line in cart.lines:
        if not line.product.linked_color:
            continue
        if not line.size:
            raise ValidationError(f"Please choose a size for {line.product.name}")
        key = shirt_key(line.product.linked_color, line.size)
        wanted[key] = wanted.get(key, 0) + line.quantity
        labels[key] = f"{line.product.name} ({line.size})"

    for key, quantity in wanted.items():
        available = raw.get(key, 0)
        if quantity > available:
            raise ValidationError(f"Not enough stock for {labels[key]}: {max(available, 0)} left")


def place_online_order(payload: dict, transactions, today: date | None = None) -> list:
    """Validate and record an online order; returns the created sale rows."""
    customer_name = require_text(payload, "customerName", "name")
    shipping = _shipping(payload)

    payment_mode = payload.get("paymentMode") or "COD"
    one_of(payment_mode, PAYMENT_MODES, "paymentMode")
    proof_url = optional_text(payload, "proofOfPayment")
    if payment_mode in PROOF_REQUIRED_MODES and not proof_url:
        raise ValidationError("Please upload proof of payment")

    cart = Cart.from_payload(payload.get("items") or [], project_catalog(transactions))
    if not cart.lines:
        raise ValidationError("Cart is empty")
    _check_stock(cart, project_raw_inventory(transactions))

    subtotal = cart.total
    discount = Decimal("0")
    voucher_code = optional_text(payload, "voucherCode")
    if voucher_code:
        voucher, discount = redeem_voucher(voucher_code, subtotal, transactions, today or utcnow().date())
        voucher_code = voucher.code

    order_id = str(uuid.uuid4())
    order_date = utcnow()
    rows = []
    shares = allocate_discount(discount, [line.line_total for line in cart.lines])
    for line, share in zip(cart.lines, shares):
        item_total = line.line_total
        details = line_details(line, order_id=order_id, customer_name=customer_name)
        details.update({
            "contactNumber": shipping["contactNumber"],
            "fulfillmentStatus": "pending",
            "paymentStatus": "unpaid",
            "status": "pending",
            "paymentMode": payment_mode,
            "shippingDetails": shipping,
            "voucherCode": voucher_code,
            "discountShare": float(share),
            "originalAmount": float(item_total),
            "isOnlineOrder": True,
            "proofOfPayment": proof_url if payment_mode in PROOF_REQUIRED_MODES else None,
        })
        size_label = f" ({line.size})" if line.size else ""
        rows.append({
            "id": str(uuid.uuid4()),
            "type": "sale",
            "amount": item_total - share,
            "description": f"Online Order: {line.product.name}{size_label}",
            "category": "shirts",
            "date": order_date,
            "details": details,
        })

    created = insert_lines(rows, "Online order")
    address = ", ".join(filter(None, [shipping["address"], shipping["barangay"], shipping["city"], shipping["province"]]))
    record_customer(customer_name, shipping["contactNumber"], address, subtotal - discount)
    return created
