# Overview: Flask API routes for discount vouchers; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..decorators import current_actor, service_errors
from ..services import activity_service, transaction_store, voucher_service
from ..time_utils import utcnow
from ..validation import to_amount

vouchers_bp = Blueprint("vouchers", __name__, url_prefix="/api/vouchers")


@vouchers_bp.get("")
@service_errors("Failed to load vouchers")
def list_vouchers_route():
    vouchers = voucher_service.list_vouchers(transaction_store.list_all(), request.args.get("q", ""))
    return jsonify([v.to_dict() for v in vouchers])


@vouchers_bp.post("")
@service_errors("Failed to create voucher")
def create_voucher_route():
    data = request.get_json(silent=True) or {}
    tx = voucher_service.create_voucher(data, transaction_store.list_all())
    activity_service.log_activity("voucher.created", tx.details, tx.id, current_actor())
    return jsonify(tx.to_dict()), 201


@vouchers_bp.post("/<voucher_id>/toggle")
@service_errors("Failed to update voucher")
def toggle_voucher_route(voucher_id: str):
    mode = current_app.config.get("VOUCHER_TOGGLE_MODE", "in_place")
    tx = voucher_service.toggle_voucher(voucher_id, mode)
    activity_service.log_activity("voucher.toggled", {"active": tx.details.get("active"), "mode": mode}, tx.id, current_actor())
    return jsonify(tx.to_dict())


@vouchers_bp.delete("/<voucher_id>")
@service_errors("Failed to delete voucher")
def delete_voucher_route(voucher_id: str):
    deleted = voucher_service.delete_voucher(voucher_id)
    if deleted:
        activity_service.log_activity("voucher.deleted", None, voucher_id, current_actor())
    return jsonify({"id": voucher_id, "deleted": deleted})


@vouchers_bp.post("/redeem")
@service_errors("Failed to apply voucher")
def redeem_voucher_route():
    """Preview a code against a subtotal; nothing is written."""
    data = request.get_json(silent=True) or {}
    subtotal = to_amount(data.get("subtotal"), "subtotal")
    voucher, discount = voucher_service.redeem_voucher(
        data.get("code") or "",
        subtotal,
        transaction_store.list_all(),
        utcnow().date(),
    )
    return jsonify({
        "voucher": voucher.to_dict(),
        "discount": float(discount),
        "total": float(subtotal - discount),
    })
