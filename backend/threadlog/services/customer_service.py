from __future__ import annotations

from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Customer
from ..validation import ValidationError


def search_customers(query: str, limit: int = 5) -> list[dict]:
    query = (query or "").strip()
    if not query:
        return []
    rows = (
        db.session.query(Customer)
        .filter(Customer.name.ilike(f"%{query}%"))
        .order_by(Customer.name.asc())
        .limit(limit)
        .all()
    )
    return [c.to_dict() for c in rows]


def upsert_customer(name: str, contact_number: str | None = None, address: str | None = None,
                    spent: Decimal | int | float = 0) -> Customer:
    """
    Match on exact name. Existing rows only get contact/address overwritten
    when a value is given; total_spent accumulates.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("name is required")

    customer = db.session.query(Customer).filter_by(name=name).first()
    if customer is None:
        customer = Customer(name=name, contact_number=contact_number, address=address,
                            total_spent=Decimal(str(spent or 0)))
        db.session.add(customer)
    else:
        if contact_number:
            customer.contact_number = contact_number
        if address:
            customer.address = address
        customer.total_spent = (customer.total_spent or Decimal("0")) + Decimal(str(spent or 0))

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return customer
