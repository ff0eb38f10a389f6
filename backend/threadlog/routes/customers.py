# Overview: Flask API routes for customer lookup and the operator activity trail.

from flask import Blueprint, jsonify, request

from ..decorators import service_errors
from ..services import activity_service, customer_service
from ..validation import to_positive_int

customers_bp = Blueprint("customers", __name__, url_prefix="/api")


@customers_bp.get("/customers")
@service_errors("Failed to search customers")
def search_customers_route():
    """Name autocomplete for the POS; empty query returns []."""
    return jsonify(customer_service.search_customers(request.args.get("q", "")))


@customers_bp.get("/activity")
@service_errors("Failed to load activity")
def list_activity_route():
    limit = request.args.get("limit")
    limit = to_positive_int(limit, "limit") if limit else 100
    return jsonify(activity_service.list_activity(min(limit, 500)))
