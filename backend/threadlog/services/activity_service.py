# Overview: Service-layer operations for the operator activity trail.

from __future__ import annotations

import json
import logging

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import ActivityLog
"""
Activity Log Invariants (authoritative)

- Append-only: rows are never updated or deleted.
- Logging never blocks or fails the action it records. A missing actor or a
  failed write is logged and skipped.
"""

logger = logging.getLogger(__name__)


def log_activity(action: str, details=None, entity_id: str | None = None, user_email: str | None = None) -> ActivityLog | None:
    if not user_email:
        logger.warning("Cannot log activity %r: no user identified", action)
        return None

    if isinstance(details, (dict, list)):
        details = json.dumps(details, default=str)

    entry = ActivityLog(
        user_email=user_email,
        action=action,
        details=details,
        entity_id=str(entity_id) if entity_id is not None else None,
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to log activity %r", action)
        return None
    return entry


def list_activity(limit: int = 100) -> list[dict]:
    rows = (
        db.session.query(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
    return [row.to_dict() for row in rows]
