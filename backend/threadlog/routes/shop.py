# backend/threadlog/routes/shop.py
"""
Public storefront routes.

No operator identity here: online orders are placed by customers. The
product listing carries per-size stock so the shop can grey out sold-out
sizes.
"""

from flask import Blueprint, jsonify, request

from ..decorators import service_errors
from ..services import activity_service, order_service, storefront_service, transaction_store

shop_bp = Blueprint("shop", __name__, url_prefix="/api/shop")


@shop_bp.get("/products")
@service_errors("Failed to load products")
def shop_products_route():
    return jsonify(storefront_service.storefront_catalog(transaction_store.list_all()))


@shop_bp.post("/orders")
@service_errors("Failed to place order")
def place_order_route():
    data = request.get_json(silent=True) or {}
    created = storefront_service.place_online_order(data, transaction_store.list_all())

    order_id = created[0].details["orderId"]
    order = order_service.find_order(order_service.load_orders(), order_id)
    activity_service.log_activity(
        "shop.order_placed",
        {"lines": len(created), "total": order.total_amount},
        order_id,
        "storefront",
    )
    return jsonify(order.to_dict()), 201
