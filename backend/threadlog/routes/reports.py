# Overview: Flask API routes for dashboard and expense reporting.

from flask import Blueprint, jsonify, request

from ..decorators import current_actor, service_errors
from ..services import activity_service, expense_service, reporting_service, transaction_store
from ..time_utils import utcnow

reports_bp = Blueprint("reports", __name__, url_prefix="/api")


@reports_bp.get("/dashboard")
@service_errors("Failed to load dashboard")
def dashboard_route():
    period = request.args.get("period", "all")
    summary = reporting_service.dashboard_summary(transaction_store.list_all(), period, utcnow())
    return jsonify(summary)


@reports_bp.get("/expenses")
@service_errors("Failed to load expenses")
def list_expenses_route():
    return jsonify([tx.to_dict() for tx in expense_service.list_expenses(transaction_store.list_all())])


@reports_bp.get("/expenses/categories")
def expense_categories_route():
    """Preset categories; "Other" takes a free-text customCategory."""
    return jsonify(list(expense_service.EXPENSE_CATEGORIES) + ["Other"])


@reports_bp.post("/expenses")
@service_errors("Failed to save expense")
def create_expense_route():
    data = request.get_json(silent=True) or {}
    actor = current_actor()
    tx = expense_service.record_expense(data, actor)
    activity_service.log_activity("expense.created", tx.details, tx.id, actor)
    return jsonify(tx.to_dict()), 201


@reports_bp.patch("/expenses/<transaction_id>")
@service_errors("Failed to update expense")
def update_expense_route(transaction_id: str):
    data = request.get_json(silent=True) or {}
    actor = current_actor()
    tx = expense_service.update_expense(transaction_id, data, actor)
    activity_service.log_activity("expense.updated", sorted(data), tx.id, actor)
    return jsonify(tx.to_dict())
