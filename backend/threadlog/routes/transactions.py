# Overview: Flask API routes for raw transaction rows; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import current_actor, service_errors
from ..services import activity_service, transaction_store
from ..validation import ValidationError

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
@service_errors("Failed to load transactions")
def list_transactions_route():
    """Full log, newest first."""
    return jsonify([tx.to_dict() for tx in transaction_store.list_all()])


@transactions_bp.post("")
@service_errors("Failed to save transaction")
def create_transaction_route():
    data = request.get_json(silent=True) or {}
    tx = transaction_store.insert(data)
    activity_service.log_activity("transaction.created", {"type": tx.type}, tx.id, current_actor())
    return jsonify(tx.to_dict()), 201


@transactions_bp.patch("/<transaction_id>")
@service_errors("Failed to update transaction")
def update_transaction_route(transaction_id: str):
    data = request.get_json(silent=True) or {}
    if not data:
        raise ValidationError("No fields to update")
    tx = transaction_store.update_fields(transaction_id, data)
    activity_service.log_activity("transaction.updated", sorted(data), tx.id, current_actor())
    return jsonify(tx.to_dict())


@transactions_bp.delete("/<transaction_id>")
@service_errors("Failed to delete transaction")
def delete_transaction_route(transaction_id: str):
    """Idempotent: deleting an id that is already gone reports deleted=false."""
    deleted = transaction_store.delete_by_id(transaction_id)
    if deleted:
        activity_service.log_activity("transaction.deleted", None, transaction_id, current_actor())
    return jsonify({"id": transaction_id, "deleted": deleted})


@transactions_bp.delete("")
@service_errors("Failed to delete transactions")
def delete_all_transactions_route():
    if request.args.get("confirm", "false").lower() != "true":
        raise ValidationError("confirm=true required to delete every transaction")
    count = transaction_store.delete_all()
    activity_service.log_activity("transaction.deleted_all", {"count": count}, None, current_actor())
    return jsonify({"deleted": count})
