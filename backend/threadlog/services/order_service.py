# Overview: Service-layer operations for orders; groups sale rows and fans edits out to every line item.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..details import sale_line
from ..errors import NotFoundError, PartialFailureError, ProviderError, StoreError
from ..validation import ValidationError, one_of, to_datetime
from threadlog.time_utils import minute_key, to_utc_z
from . import transaction_store
from .replay import newest_first
"""
Order Invariants (authoritative)

- An order is not stored. It is the group of sale rows sharing details.orderId,
  or, for legacy rows without one, sharing {customerName|Unknown}-{minute}.
  Two walk-in sales for one customer inside the same minute therefore merge.
- Rows are read newest-first. Status fields, payment mode, contact and
  tracking come from the first row seen; they are not recomputed per item.
- total_amount is the sum of item amounts. is_online_order is sticky: one
  online item makes the whole order online.
- Legacy rows (no fulfillmentStatus/paymentStatus) are migrated on read from
  details.status; the stored row is left as is.
- Edits rewrite every line item of the group (fan-out). Each write commits on
  its own, so a failure midway is reported as a partial failure.
- After any write the caller gets groups from a fresh refold, never a patched copy.
"""

logger = logging.getLogger(__name__)

FULFILLMENT_STATUSES = ("pending", "in_progress", "ready", "shipped", "cancelled")
PAYMENT_STATUSES = ("unpaid", "paid")
PAYMENT_MODES = ("Cash", "Gcash", "Bank Transfer", "COD")

EDITABLE_FIELDS = ("fulfillmentStatus", "paymentStatus", "paymentMode", "trackingNumber", "date", "customerName")

# What the old single-status UI showed for rows with no status at all
LEGACY_DEFAULT_STATUS = "paid"


@dataclass
class OrderGroup:
    id: str
    date: Optional[datetime]
    customer_name: str
    fulfillment_status: str
    payment_status: str
    payment_mode: Optional[str] = None
    is_online_order: bool = False
    items: list = field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    contact_number: Optional[str] = None
    tracking_number: Optional[str] = None
    shipping_details: Optional[dict] = None
    voucher_code: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "customerName": self.customer_name,
            "fulfillmentStatus": self.fulfillment_status,
            "paymentStatus": self.payment_status,
            "paymentMode": self.payment_mode,
            "isOnlineOrder": self.is_online_order,
            "items": [tx.to_dict() for tx in self.items],
            "totalAmount": float(self.total_amount),
            "contactNumber": self.contact_number,
            "trackingNumber": self.tracking_number,
            "shippingDetails": self.shipping_details,
            "voucherCode": self.voucher_code,
        }


def migrate_legacy_status(line) -> tuple[str, str]:
    """
    (fulfillment, payment) for a sale line, filling absent fields from the
    legacy single `status`: 'paid' meant paid-but-not-yet-shipped; any other
    value was a shipping state and says nothing about payment.
    """
    fulfillment = line.fulfillment_status
    payment = line.payment_status
    if fulfillment and payment:
        return fulfillment, payment

    legacy = line.legacy_status or LEGACY_DEFAULT_STATUS
    if legacy == "paid":
        derived = ("pending", "paid")
    else:
        derived = (legacy, "unpaid")
    return fulfillment or derived[0], payment or derived[1]


def order_key(tx, line=None) -> str:
    line = line or sale_line(tx.details or {})
    if line.order_id:
        return line.order_id
    # legacy fallback; same-customer sales in one minute collapse together
    return f"{line.customer_name or 'Unknown'}-{minute_key(tx.date)}"


def project_orders(transactions) -> list[OrderGroup]:
    groups: dict[str, OrderGroup] = {}

    for tx in newest_first(transactions):
        if tx.type != "sale":
            continue
        line = sale_line(tx.details or {})
        key = order_key(tx, line)
        amount = tx.amount if tx.amount is not None else Decimal("0")

        group = groups.get(key)
        if group is None:
            fulfillment, payment = migrate_legacy_status(line)
            group = OrderGroup(
                id=key,
                date=tx.date,
                customer_name=line.customer_name or "Unknown",
                fulfillment_status=fulfillment,
                payment_status=payment,
                payment_mode=line.payment_mode,
                is_online_order=line.is_online_order,
                contact_number=line.contact_number,
                tracking_number=line.tracking_number,
                shipping_details=line.shipping_details,
                voucher_code=line.voucher_code,
            )
            groups[key] = group
        elif line.is_online_order:
            group.is_online_order = True

        group.items.append(tx)
        group.total_amount += Decimal(str(amount))

    return sorted(groups.values(), key=lambda g: g.date or datetime.min, reverse=True)


def filter_orders(orders: list[OrderGroup], status: str = "all", search: str = "") -> list[OrderGroup]:
    needle = (search or "").strip().lower()
    result = []
    for order in orders:
        if status and status != "all" and order.fulfillment_status != status:
            continue
        if needle:
            haystack = [order.customer_name.lower()] + [(tx.description or "").lower() for tx in order.items]
            if not any(needle in text for text in haystack):
                continue
        result.append(order)
    return result


def load_orders() -> list[OrderGroup]:
    return project_orders(transaction_store.list_all())


def find_order(orders: list[OrderGroup], order_id: str) -> OrderGroup:
    for order in orders:
        if order.id == order_id:
            return order
    raise NotFoundError("Order not found", details={"order_id": order_id})


def validate_order_changes(changes: dict) -> dict:
    """Normalise an order edit; raises ValidationError before anything is written."""
    if not isinstance(changes, dict) or not changes:
        raise ValidationError("No order fields to update")

    unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(unknown)}")

    clean: dict = {}
    if "fulfillmentStatus" in changes:
        clean["fulfillmentStatus"] = one_of(changes["fulfillmentStatus"], FULFILLMENT_STATUSES, "fulfillmentStatus")
    if "paymentStatus" in changes:
        clean["paymentStatus"] = one_of(changes["paymentStatus"], PAYMENT_STATUSES, "paymentStatus")
    if "paymentMode" in changes:
        clean["paymentMode"] = one_of(changes["paymentMode"], PAYMENT_MODES, "paymentMode")
    if "trackingNumber" in changes:
        value = changes["trackingNumber"]
        if value is not None and not isinstance(value, str):
            raise ValidationError("trackingNumber must be a string")
        clean["trackingNumber"] = (value or "").strip()
    if "customerName" in changes:
        value = changes["customerName"]
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("customerName cannot be blank")
        clean["customerName"] = value.strip()
    if "date" in changes:
        clean["date"] = to_datetime(changes["date"], "date")
    return clean


def _item_fields(snapshot: dict, changes: dict) -> dict:
    details = dict(snapshot["details"])
    for key, value in changes.items():
        if key != "date":
            details[key] = value

    fields: dict = {"details": details}
    if "date" in changes:
        fields["date"] = changes["date"]
    if "customerName" in changes:
        old_name = snapshot["details"].get("customerName")
        description = snapshot["description"] or ""
        if old_name and old_name in description:
            fields["description"] = description.replace(old_name, changes["customerName"])
    return fields


def _snapshot(order: OrderGroup) -> list[dict]:
    # taken before writing: a failed commit expires the loaded rows
    return [
        {"id": tx.id, "details": dict(tx.details or {}), "description": tx.description}
        for tx in order.items
    ]


def _raise_for_failures(action: str, succeeded: list, failed: list, first_error: Exception | None) -> None:
    if not failed:
        return
    if not succeeded:
        raise first_error
    raise PartialFailureError(f"{action} partially failed", succeeded=succeeded, failed=failed)


def _groups_containing(orders: list[OrderGroup], item_ids: set) -> list[OrderGroup]:
    # legacy group ids are derived from name+minute, so an edit can rename the group
    return [o for o in orders if any(tx.id in item_ids for tx in o.items)]


def _rewrite(orders: list[OrderGroup], changes: dict):
    succeeded: list = []
    failed: list = []
    first_error = None
    for order in orders:
        for snapshot in _snapshot(order):
            try:
                transaction_store.update_fields(snapshot["id"], _item_fields(snapshot, changes))
                succeeded.append(snapshot["id"])
            except StoreError as exc:
                logger.warning("Order %s: failed to rewrite item %s: %s", order.id, snapshot["id"], exc)
                failed.append({"id": snapshot["id"], "order_id": order.id, "error": str(exc)})
                first_error = first_error or exc
    return succeeded, failed, first_error


def update_order(order_id: str, changes: dict) -> OrderGroup:
    """Apply one validated edit to every line item of an order."""
    clean = validate_order_changes(changes)
    order = find_order(load_orders(), order_id)
    item_ids = {tx.id for tx in order.items}

    succeeded, failed, first_error = _rewrite([order], clean)
    _raise_for_failures("Order update", succeeded, failed, first_error)

    refolded = _groups_containing(load_orders(), item_ids)
    if not refolded:
        raise NotFoundError("Order not found after update", details={"order_id": order_id})
    return refolded[0]


def bulk_update_orders(order_ids: list[str], changes: dict) -> list[OrderGroup]:
    clean = validate_order_changes(changes)
    if not order_ids:
        raise ValidationError("order_ids is required")

    orders = load_orders()
    targets: list[OrderGroup] = []
    missing: list = []
    first_error = None
    for order_id in dict.fromkeys(order_ids):
        try:
            targets.append(find_order(orders, order_id))
        except NotFoundError as exc:
            missing.append({"id": order_id, "order_id": order_id, "error": str(exc)})
            first_error = first_error or exc

    item_ids = {tx.id for order in targets for tx in order.items}
    succeeded, failed, write_error = _rewrite(targets, clean)
    _raise_for_failures("Bulk update", succeeded, missing + failed, first_error or write_error)

    return _groups_containing(load_orders(), item_ids)


def item_summary(order: OrderGroup) -> str:
    parts = []
    for tx in reversed(order.items):
        details = tx.details or {}
        label = details.get("itemName") or tx.description
        size = details.get("size")
        qty = details.get("quantity") or 1
        parts.append(f"{qty}x {label}" + (f" ({size})" if size else ""))
    return ", ".join(parts)


def set_tracking_number(order_id: str, tracking_number: Optional[str], *, notify: bool = False, notifier=None):
    """
    Quick tracking entry. A non-empty value also marks the order shipped;
    clearing the value leaves fulfillment alone.

    Returns (order, warning). The SMS is best effort: a provider failure
    becomes the warning and the edit stands.
    """
    tracking = (tracking_number or "").strip()
    changes: dict = {"trackingNumber": tracking}
    if tracking:
        changes["fulfillmentStatus"] = "shipped"

    order = update_order(order_id, changes)

    warning = None
    if notify and tracking:
        if notifier is None:
            warning = "SMS notifications are not configured"
        elif not order.contact_number:
            warning = "Order has no contact number; SMS not sent"
        else:
            try:
                notifier.send_tracking_notification(
                    order.contact_number,
                    order.customer_name,
                    tracking,
                    item_summary(order),
                )
            except (ProviderError, ValidationError) as exc:
                logger.warning("Tracking SMS for order %s failed: %s", order.id, exc)
                warning = f"Failed to send SMS: {exc}"
    return order, warning


def _delete_items(orders: list[OrderGroup]):
    succeeded: list = []
    failed: list = []
    first_error = None
    for order in orders:
        for tx_id in [tx.id for tx in order.items]:
            try:
                # an item already deleted elsewhere counts as done
                transaction_store.delete_by_id(tx_id)
                succeeded.append(tx_id)
            except StoreError as exc:
                logger.warning("Order %s: failed to delete item %s: %s", order.id, tx_id, exc)
                failed.append({"id": tx_id, "order_id": order.id, "error": str(exc)})
                first_error = first_error or exc
    return succeeded, failed, first_error


def delete_order(order_id: str) -> list[str]:
    """Delete every line item of an order; returns the deleted transaction ids."""
    order = find_order(load_orders(), order_id)
    succeeded, failed, first_error = _delete_items([order])
    _raise_for_failures("Order delete", succeeded, failed, first_error)
    return succeeded


def bulk_delete_orders(order_ids: list[str]) -> list[str]:
    if not order_ids:
        raise ValidationError("order_ids is required")

    orders = load_orders()
    targets: list[OrderGroup] = []
    missing: list = []
    first_error = None
    for order_id in dict.fromkeys(order_ids):
        try:
            targets.append(find_order(orders, order_id))
        except NotFoundError as exc:
            missing.append({"id": order_id, "order_id": order_id, "error": str(exc)})
            first_error = first_error or exc

    succeeded, failed, write_error = _delete_items(targets)
    _raise_for_failures("Bulk delete", succeeded, missing + failed, first_error or write_error)
    return succeeded
