from __future__ import annotations

from ..extensions import db
from threadlog.time_utils import to_utc_z


TRANSACTION_TYPES = (
    "sale",
    "expense",
    "update_stock",
    "update_product",
    "define_product",
    "delete_product",
    "voucher",
    "return",
)


class Transaction(db.Model):
    """
    One row of the business log.

    Every view (stock levels, catalog, orders, vouchers, dashboard totals) is
    folded from these rows; nothing else holds business state.

    `details` is a type-dependent JSON mapping. Always assign a new dict when
    changing it so SQLAlchemy sees the change.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_type_date", "type", "date"),
    )

    id = db.Column(db.String(64), primary_key=True)

    type = db.Column(db.String(32), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    description = db.Column(db.Text, nullable=False, default="")
    category = db.Column(db.String(64), nullable=False, default="general", index=True)

    # Business time (UTC-naive); replay and display ordering key
    date = db.Column(db.DateTime, nullable=False, index=True)

    details = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Transaction id={self.id!r} type={self.type!r} amount={self.amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "amount": float(self.amount) if self.amount is not None else 0.0,
            "description": self.description,
            "category": self.category,
            "date": to_utc_z(self.date),
            "details": dict(self.details) if self.details else {},
        }
