# backend/threadlog/routes/inventory.py
"""
Inventory routes.

Stock is folded from the whole log on every read; the write routes only
append stock-moving transactions (receipts, adjustments, returns).
"""
from flask import Blueprint, Response, jsonify, request

from ..decorators import current_actor, service_errors
from ..services import activity_service, inventory_service, transaction_store

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@service_errors("Failed to load inventory")
def raw_inventory_route():
    return jsonify(inventory_service.project_raw_inventory(transaction_store.list_all()))


@inventory_bp.get("/summary")
@service_errors("Failed to load inventory")
def inventory_summary_route():
    return jsonify(inventory_service.inventory_summary(transaction_store.list_all()))


@inventory_bp.get("/export")
@service_errors("Failed to export inventory")
def export_inventory_route():
    body = inventory_service.export_inventory_csv(transaction_store.list_all())
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=inventory_status.csv"},
    )


@inventory_bp.post("/receive")
@service_errors("Failed to add stock")
def receive_stock_route():
    data = request.get_json(silent=True) or {}
    tx = inventory_service.record_stock_receipt(data)
    activity_service.log_activity("inventory.received", tx.details, tx.id, current_actor())
    return jsonify(tx.to_dict()), 201


@inventory_bp.post("/adjust")
@service_errors("Failed to adjust stock")
def adjust_stock_route():
    data = request.get_json(silent=True) or {}
    tx = inventory_service.adjust_stock(data)
    activity_service.log_activity("inventory.adjusted", tx.details, tx.id, current_actor())
    return jsonify(tx.to_dict()), 201


@inventory_bp.post("/returns")
@service_errors("Failed to record return")
def record_return_route():
    data = request.get_json(silent=True) or {}
    tx = inventory_service.record_return(data)
    activity_service.log_activity("inventory.returned", tx.details, tx.id, current_actor())
    return jsonify(tx.to_dict()), 201


@inventory_bp.get("/options")
def inventory_options_route():
    """Size ladder and stocked blank colors for entry forms."""
    return jsonify({
        "sizes": list(inventory_service.SIZES),
        "colors": list(inventory_service.COLORS),
    })
