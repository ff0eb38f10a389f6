from __future__ import annotations

from ..extensions import db
from threadlog.time_utils import to_utc_z


class Customer(db.Model):
    """Customer directory entry; `total_spent` accumulates across checkouts."""
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True, index=True)
    contact_number = db.Column(db.String(64), nullable=True)
    address = db.Column(db.Text, nullable=True)
    total_spent = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact_number": self.contact_number,
            "address": self.address,
            "total_spent": float(self.total_spent or 0),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
