# backend/threadlog/routes/orders.py
"""
Order management routes.

Orders are projections: every response comes from a fresh fold of the log,
and every edit rewrites all line items of the order. Bulk routes answer 207
when only some of the rewrites committed.
"""

from flask import Blueprint, jsonify, request

from ..clients import get_sms_notifier
from ..decorators import current_actor, service_errors
from ..services import activity_service, order_service
from ..validation import ValidationError

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _order_ids(data: dict) -> list[str]:
    ids = data.get("order_ids")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise ValidationError("order_ids must be a list of order ids")
    return ids


@orders_bp.get("")
@service_errors("Failed to load orders")
def list_orders_route():
    status = request.args.get("status", "all")
    search = request.args.get("q", "")
    orders = order_service.filter_orders(order_service.load_orders(), status, search)
    return jsonify([o.to_dict() for o in orders])


@orders_bp.get("/<order_id>")
@service_errors("Failed to load order")
def get_order_route(order_id: str):
    order = order_service.find_order(order_service.load_orders(), order_id)
    return jsonify(order.to_dict())


@orders_bp.patch("/<order_id>")
@service_errors("Failed to update order")
def update_order_route(order_id: str):
    data = request.get_json(silent=True) or {}
    order = order_service.update_order(order_id, data)
    activity_service.log_activity("order.updated", data, order.id, current_actor())
    return jsonify(order.to_dict())


@orders_bp.post("/<order_id>/tracking")
@service_errors("Failed to update tracking number")
def set_tracking_route(order_id: str):
    """
    Quick tracking entry; a non-empty number also marks the order shipped.

    With "notify": true the customer gets an SMS. An SMS failure comes back
    as "warning" and does not undo the edit.
    """
    data = request.get_json(silent=True) or {}
    tracking = data.get("trackingNumber")
    if tracking is not None and not isinstance(tracking, str):
        raise ValidationError("trackingNumber must be a string")
    notify = bool(data.get("notify"))

    order, warning = order_service.set_tracking_number(
        order_id,
        tracking,
        notify=notify,
        notifier=get_sms_notifier() if notify else None,
    )
    activity_service.log_activity("order.tracking", {"trackingNumber": tracking, "notify": notify}, order.id, current_actor())
    body = {"order": order.to_dict()}
    if warning:
        body["warning"] = warning
    return jsonify(body)


@orders_bp.delete("/<order_id>")
@service_errors("Failed to delete order")
def delete_order_route(order_id: str):
    deleted = order_service.delete_order(order_id)
    activity_service.log_activity("order.deleted", {"items": deleted}, order_id, current_actor())
    return jsonify({"id": order_id, "deleted": deleted})


@orders_bp.post("/bulk-update")
@service_errors("Bulk update failed")
def bulk_update_route():
    data = request.get_json(silent=True) or {}
    ids = _order_ids(data)
    orders = order_service.bulk_update_orders(ids, data.get("changes") or {})
    activity_service.log_activity("order.bulk_updated", {"order_ids": ids, "changes": data.get("changes")}, None, current_actor())
    return jsonify([o.to_dict() for o in orders])


@orders_bp.post("/bulk-delete")
@service_errors("Bulk delete failed")
def bulk_delete_route():
    data = request.get_json(silent=True) or {}
    ids = _order_ids(data)
    deleted = order_service.bulk_delete_orders(ids)
    activity_service.log_activity("order.bulk_deleted", {"order_ids": ids}, None, current_actor())
    return jsonify({"deleted": deleted})
