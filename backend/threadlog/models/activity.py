from __future__ import annotations

from ..extensions import db
from threadlog.time_utils import to_utc_z


class ActivityLog(db.Model):
    """
    Operator activity trail.

    Append-only: rows are never updated or deleted by the application.
    """
    __tablename__ = "activity_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_email = db.Column(db.String(255), nullable=False, index=True)
    action = db.Column(db.String(128), nullable=False, index=True)
    details = db.Column(db.Text, nullable=True)
    entity_id = db.Column(db.String(64), nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_email": self.user_email,
            "action": self.action,
            "details": self.details,
            "entity_id": self.entity_id,
            "created_at": to_utc_z(self.created_at),
        }
