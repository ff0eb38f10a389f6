# Overview: Service-layer operations for inventory; stock fold plus stock-moving workflows.

from __future__ import annotations

import csv
import io
import re

from ..details import stock_movement
from ..validation import (
    ValidationError,
    optional_text,
    require_text,
    to_amount,
    to_int,
    to_positive_int,
)
from . import transaction_store
from .replay import chronological
"""
Inventory Invariants (authoritative)

- Stock is ledger-derived: never stored, always folded from transactions.
- Stock-affecting types: expense, update_stock, return (add) and sale (subtract).
  Rows with category 'return' are considered even under another type.
- Key: shirt-{color}-{size} for blanks, acc-{name} otherwise; trimmed and
  lower-cased so surface differences collapse onto one line.
- Missing quantity contributes 0. Malformed rows are skipped, never raised.
- No clamping: an oversold SKU goes negative and stays visible.
"""

STOCK_TYPES = frozenset({"expense", "update_stock", "sale", "return"})
INCREASING_TYPES = frozenset({"expense", "update_stock", "return"})

SIZES = ("XS", "S", "M", "L", "XL", "2XL", "3XL")
COLORS = ("Black", "White", "Navy", "Heather Grey", "Red", "Blue", "Green", "Yellow", "Pink", "Aqua", "Peach")

# Storefront stock for products with no linked blank color
UNLIMITED_STOCK = 999

_WHITESPACE = re.compile(r"\s+")


def shirt_key(color: str, size: str) -> str:
    return f"shirt-{color.strip().lower()}-{size.strip().lower()}"


def accessory_key(name: str) -> str:
    return "acc-" + _WHITESPACE.sub("-", name.strip()).lower()


def _is_blanks(tx, movement) -> bool:
    return tx.category == "blanks" or movement.category == "blanks"


def sku_key(tx) -> str | None:
    """Derived inventory key for a transaction, or None if it has no line."""
    if not tx.details:
        return None
    movement = stock_movement(tx.details)

    if _is_blanks(tx, movement):
        if not movement.color or not movement.size:
            return None
        return shirt_key(movement.color, movement.size)

    name = movement.sub_category or movement.item_name or (tx.description or "").strip()
    if not name:
        return None
    return accessory_key(name)


def project_raw_inventory(transactions) -> dict[str, int]:
    """Fold the log into {sku key: signed stock count}."""
    inventory: dict[str, int] = {}

    for tx in chronological(transactions):
        if not tx.details:
            continue
        if tx.type not in STOCK_TYPES and tx.category != "return":
            continue

        key = sku_key(tx)
        if key is None:
            continue

        quantity = stock_movement(tx.details).quantity
        inventory.setdefault(key, 0)
        if tx.type in INCREASING_TYPES:
            inventory[key] += quantity
        elif tx.type == "sale":
            inventory[key] -= quantity

    return inventory


def stock_for(product, size: str, raw_inventory: dict[str, int]) -> int:
    """Sellable stock for a catalog product in one size (storefront gating)."""
    if not product.linked_color:
        return UNLIMITED_STOCK
    return raw_inventory.get(shirt_key(product.linked_color, size), 0)


def _size_rank(size: str) -> int:
    upper = size.upper()
    return SIZES.index(upper) if upper in SIZES else len(SIZES)


def inventory_summary(transactions) -> list[dict]:
    """Rows for the inventory table: blanks by color then size ladder, accessories after."""
    raw = project_raw_inventory(transactions)
    rows = []
    for key, quantity in raw.items():
        if key.startswith("shirt-"):
            # size never contains a hyphen
            color, _, size = key[len("shirt-"):].rpartition("-")
            rows.append({"key": key, "kind": "blanks", "color": color, "size": size, "name": None, "quantity": quantity})
        else:
            rows.append({"key": key, "kind": "accessories", "color": None, "size": None, "name": key[len("acc-"):], "quantity": quantity})

    def sort_key(row):
        if row["kind"] == "blanks":
            return (0, row["color"], _size_rank(row["size"]), "")
        return (1, "", 0, row["name"])

    return sorted(rows, key=sort_key)


def export_inventory_csv(transactions) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["Key", "Color", "Size", "Name", "Quantity"])
    for row in inventory_summary(transactions):
        writer.writerow([row["key"], row["color"] or "", row["size"] or "", row["name"] or "", row["quantity"]])
    return buf.getvalue()


def _line_details(payload: dict, category: str) -> dict:
    if category == "blanks":
        size = require_text(payload, "size")
        color = require_text(payload, "color")
        if size.upper() not in SIZES:
            raise ValidationError(f"size must be one of: {', '.join(SIZES)}")
        return {"size": size.upper(), "color": color}
    return {"subCategory": require_text(payload, "subCategory", "item name")}


def record_stock_receipt(payload: dict):
    """Stock bought in: an expense row carrying the quantity received."""
    category = payload.get("category") or "blanks"
    if category not in ("blanks", "accessories"):
        raise ValidationError("category must be one of: blanks, accessories")

    quantity = to_positive_int(payload.get("quantity"), "quantity")
    cost = to_amount(payload.get("cost") or 0, "cost")
    details = {"quantity": quantity, **_line_details(payload, category)}

    description = optional_text(payload, "description")
    if not description:
        if category == "blanks":
            description = f"Bought {quantity}x {details['color']} {details['size']}"
        else:
            description = f"Bought {details['subCategory']}"

    return transaction_store.insert({
        "type": "expense",
        "amount": cost,
        "description": description,
        "category": category,
        "date": payload.get("date"),
        "details": details,
    })


def adjust_stock(payload: dict):
    """Manual correction; quantity is signed."""
    category = payload.get("category") or "blanks"
    if category not in ("blanks", "accessories"):
        raise ValidationError("category must be one of: blanks, accessories")

    quantity = to_int(payload.get("quantity"), "quantity")
    if quantity == 0:
        raise ValidationError("quantity cannot be zero")
    details = {"quantity": quantity, **_line_details(payload, category)}
    reason = optional_text(payload, "reason")
    if reason:
        details["reason"] = reason

    label = f"{details['color']} {details['size']}" if category == "blanks" else details["subCategory"]
    return transaction_store.insert({
        "type": "update_stock",
        "amount": 0,
        "description": f"Stock adjustment {quantity:+d} {label}",
        "category": category,
        "date": payload.get("date"),
        "details": details,
    })


def record_return(payload: dict):
    """Goods back from a customer; restocks the line."""
    kind = payload.get("kind") or "blanks"
    if kind not in ("blanks", "accessories"):
        raise ValidationError("kind must be one of: blanks, accessories")

    quantity = to_positive_int(payload.get("quantity"), "quantity")
    refund = to_amount(payload.get("refund") or 0, "refund")
    details = {"quantity": quantity, **_line_details(payload, kind)}
    if kind == "blanks":
        details["category"] = "blanks"
    order_id = optional_text(payload, "orderId")
    if order_id:
        details["orderId"] = order_id

    label = f"{details['color']} {details['size']}" if kind == "blanks" else details["subCategory"]
    return transaction_store.insert({
        "type": "return",
        "amount": refund,
        "description": optional_text(payload, "description") or f"Returned {quantity}x {label}",
        "category": "return",
        "date": payload.get("date"),
        "details": details,
    })
