"""
Typed views over the open-ended `Transaction.details` mapping.

Each transaction type reads its own field set. Parsing is lenient: a missing
or malformed field becomes None (or 0 for quantities), never an exception,
because historical rows predate most of these fields. The stored dict is
never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _int_or_zero(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError):
        return 0


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _optional_int(value: Any) -> Optional[int]:
    number = _decimal(value)
    return int(number) if number is not None else None


@dataclass(frozen=True)
class StockMovement:
    """expense / update_stock / return / sale as seen by the stock fold."""
    quantity: int = 0
    color: Optional[str] = None
    size: Optional[str] = None
    sub_category: Optional[str] = None
    item_name: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class SaleLineDetails:
    order_id: Optional[str] = None
    customer_name: Optional[str] = None
    quantity: int = 0
    fulfillment_status: Optional[str] = None
    payment_status: Optional[str] = None
    legacy_status: Optional[str] = None
    payment_mode: Optional[str] = None
    is_online_order: bool = False
    tracking_number: Optional[str] = None
    contact_number: Optional[str] = None
    shipping_details: Optional[dict] = None
    voucher_code: Optional[str] = None


@dataclass(frozen=True)
class ProductDefinition:
    name: Optional[str] = None
    price: Optional[Decimal] = None
    image_url: Optional[str] = None
    linked_color: Optional[str] = None
    category: Optional[str] = None
    order: Optional[int] = None
    # keys actually present in the source mapping (used by update merges)
    provided: frozenset = field(default_factory=frozenset)


@dataclass(frozen=True)
class ProductRetraction:
    name: Optional[str] = None


@dataclass(frozen=True)
class VoucherDefinition:
    code: Optional[str] = None
    discount_type: Optional[str] = None
    value: Optional[Decimal] = None
    active: bool = True
    expiry_date: Optional[str] = None
    usage_limit: Optional[int] = None


def stock_movement(details: Mapping) -> StockMovement:
    return StockMovement(
        quantity=_int_or_zero(details.get("quantity")),
        # linkedColor comes from sales of products tied to a blank color
        color=_text(details.get("color")) or _text(details.get("linkedColor")),
        size=_text(details.get("size")),
        sub_category=_text(details.get("subCategory")),
        item_name=_text(details.get("itemName")),
        category=_text(details.get("category")),
    )


def sale_line(details: Mapping) -> SaleLineDetails:
    shipping = details.get("shippingDetails")
    if not isinstance(shipping, Mapping):
        shipping = None
    contact = _text(details.get("contactNumber"))
    if contact is None and shipping is not None:
        contact = _text(shipping.get("contactNumber"))

    return SaleLineDetails(
        order_id=_text(details.get("orderId")),
        customer_name=_text(details.get("customerName")),
        quantity=_int_or_zero(details.get("quantity")),
        fulfillment_status=_text(details.get("fulfillmentStatus")),
        payment_status=_text(details.get("paymentStatus")),
        legacy_status=_text(details.get("status")),
        payment_mode=_text(details.get("paymentMode")),
        is_online_order=details.get("isOnlineOrder") is True,
        tracking_number=_text(details.get("trackingNumber")),
        contact_number=contact,
        shipping_details=dict(shipping) if shipping is not None else None,
        voucher_code=_text(details.get("voucherCode")),
    )


_PRODUCT_KEYS = {
    "name": "name",
    "price": "price",
    "imageUrl": "image_url",
    "linkedColor": "linked_color",
    "category": "category",
    "order": "order",
}


def product_definition(details: Mapping) -> ProductDefinition:
    return ProductDefinition(
        name=_text(details.get("name")),
        price=_decimal(details.get("price")),
        image_url=_text(details.get("imageUrl")),
        linked_color=_text(details.get("linkedColor")),
        category=_text(details.get("category")),
        order=_optional_int(details.get("order")),
        provided=frozenset(_PRODUCT_KEYS[k] for k in details if k in _PRODUCT_KEYS),
    )


def product_retraction(details: Mapping) -> ProductRetraction:
    return ProductRetraction(name=_text(details.get("name")))


def voucher_definition(details: Mapping) -> VoucherDefinition:
    return VoucherDefinition(
        code=_text(details.get("code")),
        discount_type=_text(details.get("discountType")),
        value=_decimal(details.get("value")),
        # absent flag means active
        active=details.get("active") is not False,
        expiry_date=_text(details.get("expiryDate")),
        usage_limit=_optional_int(details.get("usageLimit")),
    )

