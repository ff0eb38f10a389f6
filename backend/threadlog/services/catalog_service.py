# Overview: Service-layer operations for the product catalog; replayed from define/update/delete rows.

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from ..details import product_definition, product_retraction
from ..errors import NotFoundError
from ..validation import ValidationError, optional_text, require_text, to_amount, to_int
from . import transaction_store
from .replay import chronological
"""
Catalog Invariants (authoritative)

- Entries are keyed by product name and rebuilt by replaying the log oldest-first.
- define_product replaces the whole entry: an omitted optional field is cleared.
- update_product merges the provided fields onto a defined entry; no-op otherwise.
- delete_product removes the name for everything after it. Past sales and
  expenses that mention the product are untouched.
- Output is stable-sorted by `order` (9999 when unspecified).

Replaying newest-first would apply a delete before the define it retracts,
so the fold always reorders its input.
"""

DEFAULT_ORDER = 9999
DEFAULT_CATEGORY = "shirts"


@dataclass(frozen=True)
class CatalogProduct:
    id: str
    name: str
    price: Optional[Decimal]
    image_url: Optional[str]
    linked_color: Optional[str]
    category: str = DEFAULT_CATEGORY
    order: int = DEFAULT_ORDER

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price) if self.price is not None else None,
            "imageUrl": self.image_url,
            "linkedColor": self.linked_color,
            "category": self.category,
            "order": self.order,
        }


def project_catalog(transactions) -> list[CatalogProduct]:
    products: dict[str, CatalogProduct] = {}

    for tx in chronological(transactions):
        if tx.type == "define_product":
            definition = product_definition(tx.details or {})
            if not definition.name:
                continue
            products[definition.name] = CatalogProduct(
                id=tx.id,  # latest defining row
                name=definition.name,
                price=definition.price,
                image_url=definition.image_url,
                linked_color=definition.linked_color,
                category=definition.category or DEFAULT_CATEGORY,
                order=definition.order if definition.order is not None else DEFAULT_ORDER,
            )

        elif tx.type == "update_product":
            patch = product_definition(tx.details or {})
            current = products.get(patch.name) if patch.name else None
            if current is None:
                continue
            changes = {"id": tx.id}
            for attr in ("price", "image_url", "linked_color", "category", "order"):
                if attr in patch.provided:
                    changes[attr] = getattr(patch, attr)
            if changes.get("category", current.category) is None:
                changes["category"] = DEFAULT_CATEGORY
            if "order" in changes and changes["order"] is None:
                changes["order"] = DEFAULT_ORDER
            products[patch.name] = replace(current, **changes)

        elif tx.type == "delete_product":
            name = product_retraction(tx.details or {}).name
            if name:
                products.pop(name, None)

    # sorted() is stable, ties keep replay insertion order
    return sorted(products.values(), key=lambda p: p.order)


def find_product(catalog: list[CatalogProduct], name: str) -> CatalogProduct | None:
    for product in catalog:
        if product.name == name:
            return product
    return None


def _definition_details(payload: dict, name: str) -> dict:
    details = {"name": name, "price": float(to_amount(payload.get("price"), "price"))}

    image_url = optional_text(payload, "imageUrl")
    if image_url:
        details["imageUrl"] = image_url
    linked_color = optional_text(payload, "linkedColor")
    if linked_color:
        details["linkedColor"] = linked_color
    category = optional_text(payload, "category")
    if category:
        details["category"] = category
    if payload.get("order") is not None:
        details["order"] = to_int(payload.get("order"), "order")
    return details


def define_product(payload: dict):
    """Create or fully redefine a product."""
    name = require_text(payload, "name")
    if payload.get("price") is None:
        raise ValidationError("price is required")
    details = _definition_details(payload, name)
    return transaction_store.insert({
        "type": "define_product",
        "amount": 0,
        "description": f"Defined product {name}",
        "category": "system",
        "details": details,
    })


def update_product(name: str, payload: dict, transactions):
    """Merge changed fields onto a currently defined product."""
    if find_product(project_catalog(transactions), name) is None:
        raise NotFoundError("Product not found", details={"name": name})

    details: dict = {"name": name}
    if "price" in payload:
        details["price"] = float(to_amount(payload.get("price"), "price"))
    for key in ("imageUrl", "linkedColor", "category"):
        if key in payload:
            details[key] = optional_text(payload, key)
    if "order" in payload:
        details["order"] = to_int(payload["order"], "order") if payload["order"] is not None else None
    if len(details) == 1:
        raise ValidationError("No product fields to update")

    return transaction_store.insert({
        "type": "update_product",
        "amount": 0,
        "description": f"Updated product {name}",
        "category": "system",
        "details": details,
    })


def delete_product(name: str):
    """Retract a product from the catalog; history stays."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("name is required")
    return transaction_store.insert({
        "type": "delete_product",
        "amount": 0,
        "description": f"Deleted product {name}",
        "category": "system",
        "details": {"name": name},
    })
