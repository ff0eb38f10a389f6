# Overview: Flask API route for back-office POS checkout.

from flask import Blueprint, jsonify, request

from ..decorators import current_actor, service_errors
from ..services import activity_service, catalog_service, order_service, pos_service, transaction_store

pos_bp = Blueprint("pos", __name__, url_prefix="/api/pos")


@pos_bp.post("/checkout")
@service_errors("Failed to record sale")
def checkout_route():
    """
    Record a walk-in sale.

    Body: {"customerName", "items": [{"product", "size", "quantity"}],
           "paymentMode", "paymentStatus", "fulfillmentStatus", "contactNumber"}
    No stock gating here: staff may oversell.
    """
    data = request.get_json(silent=True) or {}
    catalog = catalog_service.project_catalog(transaction_store.list_all())
    created = pos_service.checkout_from_payload(data, catalog)

    order_id = created[0].details["orderId"]
    order = order_service.find_order(order_service.load_orders(), order_id)
    activity_service.log_activity(
        "pos.checkout",
        {"lines": len(created), "total": order.total_amount},
        order_id,
        current_actor(),
    )
    return jsonify({
        "order": order.to_dict(),
        "transactions": [tx.to_dict() for tx in created],
    }), 201
