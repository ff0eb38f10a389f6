# Overview: Flask API routes for the product catalog; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import current_actor, service_errors
from ..services import activity_service, catalog_service, transaction_store

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@service_errors("Failed to load products")
def list_products_route():
    catalog = catalog_service.project_catalog(transaction_store.list_all())
    return jsonify([p.to_dict() for p in catalog])


@products_bp.post("")
@service_errors("Failed to save product")
def define_product_route():
    data = request.get_json(silent=True) or {}
    tx = catalog_service.define_product(data)
    activity_service.log_activity("product.defined", tx.details, tx.id, current_actor())
    return jsonify(tx.to_dict()), 201


@products_bp.patch("/<name>")
@service_errors("Failed to update product")
def update_product_route(name: str):
    data = request.get_json(silent=True) or {}
    tx = catalog_service.update_product(name, data, transaction_store.list_all())
    activity_service.log_activity("product.updated", tx.details, tx.id, current_actor())
    return jsonify(tx.to_dict()), 201


@products_bp.delete("/<name>")
@service_errors("Failed to delete product")
def delete_product_route(name: str):
    tx = catalog_service.delete_product(name)
    activity_service.log_activity("product.deleted", tx.details, tx.id, current_actor())
    return jsonify(tx.to_dict()), 201
