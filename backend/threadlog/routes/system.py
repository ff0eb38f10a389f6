# backend/threadlog/routes/system.py
"""
System health endpoint.

Reports store reachability and whether the optional collaborators (SMS
provider, PSGC lookups) are configured.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text

from ..clients import get_sms_notifier
from ..extensions import db
from ..models import Transaction
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        transaction_count = db.session.query(Transaction).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"transactions": transaction_count},
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: store reachable (SMS may still be unconfigured: "degraded")
    - 503: store unreachable
    """
    start_time = time.time()
    database_health = check_database_health()
    sms_configured = get_sms_notifier().configured

    if database_health["status"] == "unhealthy":
        overall_status, http_status = "unhealthy", 503
    elif not sms_configured:
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    return {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "database": database_health,
            "sms": {"status": "healthy" if sms_configured else "not_configured"},
        },
    }, http_status
